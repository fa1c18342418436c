"""cai CLI adapter package.

Architectural role:
- Defines the terminal interaction boundary.
- Assembles prompts and execution options from arguments and stdin.
- Delegates provider work to `cai.llm.service` and renders the outcome.

Scope:
- No model invocation logic is implemented in this package.
"""
