"""Logging configuration with pretty formatting for Relaygraph."""

import logging
from typing import Optional, Dict, Any
from enum import Enum, IntEnum
from datetime import datetime
from pydantic import BaseModel, Field

# ANSI Color Codes
class Colors:
    """ANSI color codes for pretty terminal output."""
    HEADER = '\033[95m'      # Pink
    INFO = '\033[94m'        # Blue
    SUCCESS = '\033[92m'     # Green
    WARNING = '\033[93m'     # Yellow
    ERROR = '\033[91m'       # Red
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'

PLAIN_FORMAT = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"

DETAILED_FORMAT = (
    f"{Colors.DIM}%(asctime)s{Colors.RESET} │ "
    f"%(colored_level)-40s │ "
    f"{Colors.DIM}%(name)s{Colors.RESET} │ "
    f"%(message)s"
)

class PrettyFormatter(logging.Formatter):
    """Formatter that colors the level name and adds a symbol."""

    level_colors = {
        'DEBUG': (Colors.DIM, '🔍'),
        'VERBOSE': (Colors.DIM, '💬'),
        'INFO': (Colors.INFO, 'ℹ️'),
        'WARNING': (Colors.WARNING, '⚠️'),
        'ERROR': (Colors.ERROR, '❌'),
        'CRITICAL': (Colors.ERROR + Colors.BOLD, '🚨'),
        'AGENT': (Colors.SUCCESS, '🤖'),
        'TOOL': (Colors.HEADER, '🔧')
    }

    def format(self, record):
        color, symbol = self.level_colors.get(record.levelname, (Colors.RESET, '•'))
        record.colored_level = f"{color}{symbol} {record.levelname}{Colors.RESET}"
        message = super().format(record)

        if record.levelno >= logging.WARNING:
            message = f"{message}\n{Colors.DIM}{'─' * 80}{Colors.RESET}"

        return message

class PrettyLogHandler(logging.StreamHandler):
    """Stream handler that stamps records with a short wall-clock time."""

    def emit(self, record):
        try:
            record.asctime = datetime.fromtimestamp(record.created).strftime('%H:%M:%S')
            self.stream.write(self.format(record) + self.terminator)
            self.flush()
        except Exception:
            self.handleError(record)

class LogComponent(str, Enum):
    """Components that can be logged."""
    AGENT = "relaygraph.core.agent"
    SUPERVISOR = "relaygraph.core.agent.supervisor"
    TOOLS = "relaygraph.core.tools"
    GRAPH = "relaygraph.core.graph"
    NODES = "relaygraph.core.graph.nodes"
    WORKFLOW = "relaygraph.core.graph.workflow"
    CACHE = "relaygraph.core.graph.cache"
    PATTERNS = "relaygraph.core.patterns"

class LogLevel(IntEnum):
    """Log levels mapped to logging module levels."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL
    AGENT = 25  # agent outputs
    TOOL = 26   # tool calls

class VerbosityLevel(IntEnum):
    """Verbosity levels, including VERBOSE between DEBUG and INFO."""
    DEBUG = logging.DEBUG
    VERBOSE = 15
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

logging.addLevelName(LogLevel.AGENT, "AGENT")
logging.addLevelName(LogLevel.TOOL, "TOOL")
logging.addLevelName(VerbosityLevel.VERBOSE, "VERBOSE")

class RelayLoggingConfig(BaseModel):
    """Configuration for logging behavior."""
    level: VerbosityLevel = Field(default=VerbosityLevel.INFO)
    show_llm_messages: bool = Field(default=True)
    show_tool_calls: bool = Field(default=True)
    show_node_transitions: bool = Field(default=False)

def configure_logging(
    default_level: LogLevel = LogLevel.INFO,
    component_levels: Optional[Dict[LogComponent, LogLevel]] = None,
    pretty: bool = True,
    log_file: Optional[str] = None
) -> None:
    """Configure the root logger and per-component levels.

    Args:
        default_level: Level for the root logger
        component_levels: Optional per-component overrides
        pretty: Use colored console output
        log_file: Optional path for an uncolored file log
    """
    handlers = []

    console_handler = PrettyLogHandler() if pretty else logging.StreamHandler()
    console_handler.setFormatter(
        PrettyFormatter(DETAILED_FORMAT) if pretty else logging.Formatter(PLAIN_FORMAT)
    )
    handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(int(default_level))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)

    if not component_levels:
        component_levels = {
            LogComponent.AGENT: LogLevel.AGENT,
            LogComponent.TOOLS: LogLevel.TOOL,
            LogComponent.GRAPH: LogLevel.INFO,
            LogComponent.NODES: LogLevel.INFO,
            LogComponent.PATTERNS: LogLevel.INFO,
        }

    for component, level in component_levels.items():
        logging.getLogger(component.value).setLevel(int(level))

def get_logger(component: LogComponent) -> logging.Logger:
    """Get a logger for a component, with `.agent()` and `.tool()` helpers."""
    logger = logging.getLogger(component.value)

    def log_agent(msg: str) -> None:
        logger.log(LogLevel.AGENT, f"{Colors.SUCCESS}{msg}{Colors.RESET}")

    def log_tool(msg: str) -> None:
        logger.log(LogLevel.TOOL, f"{Colors.HEADER}{msg}{Colors.RESET}")

    logger.agent = log_agent
    logger.tool = log_tool

    return logger

def log_verbose(logger: logging.Logger, message: str) -> None:
    """Log a message at VERBOSE level."""
    if logger.isEnabledFor(VerbosityLevel.VERBOSE):
        logger.log(VerbosityLevel.VERBOSE, message)

def log_state(logger: logging.Logger, state: Dict[str, Any], prefix: str = "") -> None:
    """Log a state mapping one key per line at DEBUG level."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    for key, value in state.items():
        if isinstance(value, dict):
            logger.debug(f"{prefix}{key}:")
            log_state(logger, value, prefix + "  ")
        else:
            logger.debug(f"{prefix}{key}: {value}")
