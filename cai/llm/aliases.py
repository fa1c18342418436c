"""Model alias resolution.

Lookup is an exact, case-sensitive scan of the provider's table in
`model_aliases`; the first matching alias wins. Unknown input is returned
unchanged so fully qualified model ids work without a table entry.
"""

from cai.core.types import Provider
from cai.llm.model_aliases import ALIAS_TABLES


def resolve(provider: Provider, alias: str) -> str:
    """Return the canonical model id for `alias`, or `alias` itself."""
    for key, model_id in ALIAS_TABLES[provider]:
        if key == alias:
            return model_id
    return alias


def format_aliases(provider: Provider) -> str:
    """Render the provider's alias table for CLI help output."""
    return "".join(
        f"  {alias: <13} → {model_id}\n"
        for alias, model_id in ALIAS_TABLES[provider]
    )
