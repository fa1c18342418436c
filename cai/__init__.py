"""cai: command-line client for prompting hosted LLM providers.

Package layout:
    - `core`: shared data contracts and the error taxonomy.
    - `llm`: alias tables, configuration, request building, payload shaping,
      dispatch, response extraction, and provider selection.
    - `media`: naming and persistence of generated images and audio.
    - `api`: CLI adapter and terminal rendering.
"""

__version__ = "0.12.0"
