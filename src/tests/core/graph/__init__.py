"""Test suite for the relaygraph graph engine.

1. Base Graph Tests (test_base.py)
   - Node registration and edge wiring
   - Running, streaming and routing
   - Failure propagation and the visit guard

2. Node Tests (nodes/)
   - Function, LLM, condition and transform nodes
   - Node type registry

3. State Management (test_state.py)
   - Merge strategies and defaults
   - Read-only snapshots

4. Configuration (test_config.py)
   - Declarative configuration parsing
   - Structural validation

5. Orchestration (test_builder.py, test_executor.py, test_research.py)
   - Building graphs from configuration
   - Cached execution
   - The deep research loop
"""
