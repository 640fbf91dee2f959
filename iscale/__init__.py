"""
iScale analysis core.

Photo analysis pipeline: per-mode prompts, multimodal request building,
transport with error classification, tolerant reply parsing and
persistence of typed outcomes.

Structure:
- domain/: Modes, prompts, outcome models, parser, persistence codec
- infrastructure/: HTTP transport, imaging, credentials, record stores
- application/: Use cases orchestrating the pipeline and history
"""

__version__ = "1.0.0"
