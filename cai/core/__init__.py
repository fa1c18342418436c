"""Core data contracts package.

Architectural role:
    Holds the immutable value types passed between the `cai.llm` pipeline
    stages and the exception hierarchy those stages raise.

Composition:
    - `types`: providers, model specifiers, request descriptors, payloads and
      outcomes.
    - `errors`: typed failures surfaced to the CLI adapter.

Determinism and side effects:
    Package import is deterministic and side-effect free.
"""
