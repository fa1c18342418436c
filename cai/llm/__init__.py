"""LLM provider adaptation package.

Architectural role:
    Resolves model aliases, builds request targets from configuration, shapes
    provider-specific payloads, dispatches them and parses the responses.

Module split:
    - `model_aliases` / `aliases`: alias tables and resolution.
    - `provider_config`: configuration loading and request-target building.
    - `selection`: explicit or credential-based provider choice.
    - `payload`: prompt-to-payload adapter.
    - `client`: HTTP transport.
    - `extract`: response parsing and media saving.
    - `service`: end-to-end orchestration.
"""
