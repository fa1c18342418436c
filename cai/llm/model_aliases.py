"""Per-provider alias tables.

Each table is an ordered sequence of `(alias, model_id)` pairs. Several
aliases may point at the same model id. A model id never appears as the
alias of a different model id, so resolving twice is a no-op.

Check the vendors' model catalogs before editing:
    - https://docs.anthropic.com/en/docs/about-claude/models
    - https://inference-docs.cerebras.ai/models/overview
    - https://api-docs.deepseek.com/quick_start/pricing
    - https://ai.google.dev/gemini-api/docs/models
    - https://console.groq.com/docs/models
    - https://ollama.com/library
    - https://platform.openai.com/docs/models
    - https://docs.perplexity.ai/getting-started/models
    - https://docs.x.ai/docs/models
"""

from cai.core.types import Provider


ANTHROPIC_MODELS = (
    ("opus", "claude-opus-4-1"),
    ("op", "claude-opus-4-1"),
    ("o", "claude-opus-4-1"),
    ("opus-4", "claude-opus-4-0"),
    ("sonnet", "claude-sonnet-4-5"),
    ("so", "claude-sonnet-4-5"),
    ("s", "claude-sonnet-4-5"),
    ("sonnet-4", "claude-sonnet-4-0"),
    ("sonnet-3.7", "claude-3-7-sonnet-latest"),
    ("so37", "claude-3-7-sonnet-latest"),
    ("haiku", "claude-3-5-haiku-latest"),
    ("ha", "claude-3-5-haiku-latest"),
    ("h", "claude-3-5-haiku-latest"),
)

CEREBRAS_MODELS = (
    ("llama", "llama3.1-8b"),
    ("ll", "llama3.1-8b"),
    ("l", "llama3.1-8b"),
    ("llama-70", "llama-3.3-70b"),
    ("ll70", "llama-3.3-70b"),
    ("scout", "llama-4-scout-17b-16e-instruct"),
    ("qwen", "qwen-3-32b"),
    ("qw", "qwen-3-32b"),
    ("gpt-oss", "gpt-oss-120b"),
    ("oss", "gpt-oss-120b"),
)

DEEPSEEK_MODELS = (
    ("chat", "deepseek-chat"),
    ("c", "deepseek-chat"),
    ("v3", "deepseek-chat"),
    ("reasoner", "deepseek-reasoner"),
    ("r", "deepseek-reasoner"),
    ("r1", "deepseek-reasoner"),
)

GOOGLE_MODELS = (
    ("flash", "gemini-2.5-flash"),
    ("fl", "gemini-2.5-flash"),
    ("f", "gemini-2.5-flash"),
    ("pro", "gemini-2.5-pro"),
    ("p", "gemini-2.5-pro"),
    ("lite", "gemini-2.5-flash-lite"),
    ("li", "gemini-2.5-flash-lite"),
    ("flash-2", "gemini-2.0-flash"),
    ("image", "gemini-2.5-flash-image-preview"),
    ("im", "gemini-2.5-flash-image-preview"),
    ("gemma", "gemma-3-27b-it"),
)

GROQ_MODELS = (
    ("llama", "llama-3.1-8b-instant"),
    ("ll", "llama-3.1-8b-instant"),
    ("l", "llama-3.1-8b-instant"),
    ("llama-70", "llama-3.3-70b-versatile"),
    ("ll70", "llama-3.3-70b-versatile"),
    ("scout", "meta-llama/llama-4-scout-17b-16e-instruct"),
    ("maverick", "meta-llama/llama-4-maverick-17b-128e-instruct"),
    ("mixtral", "mixtral-8x7b-32768"),
    ("mi", "mixtral-8x7b-32768"),
    ("gemma", "gemma2-9b-it"),
    ("ge", "gemma2-9b-it"),
    ("qwen", "qwen/qwen3-32b"),
    ("qw", "qwen/qwen3-32b"),
    ("kimi", "moonshotai/kimi-k2-instruct"),
    ("gpt-oss", "openai/gpt-oss-120b"),
    ("oss", "openai/gpt-oss-120b"),
    ("oss-20", "openai/gpt-oss-20b"),
    ("deepseek", "deepseek-r1-distill-llama-70b"),
    ("r1", "deepseek-r1-distill-llama-70b"),
)

OLLAMA_MODELS = (
    ("llama", "llama3.2"),
    ("ll", "llama3.2"),
    ("l", "llama3.2"),
    ("ll3.1", "llama3.1"),
    ("mix", "mixtral"),
    ("mi", "mixtral"),
    ("mis", "mistral"),
    ("gemma", "gemma3"),
    ("ge", "gemma3"),
    ("cg", "codegemma"),
    ("cr", "command-r"),
    ("crp", "command-r-plus"),
    ("qwen", "qwen3"),
    ("qw", "qwen3"),
    ("deepseek", "deepseek-r1"),
    ("r1", "deepseek-r1"),
    ("phi", "phi4"),
)

OPENAI_MODELS = (
    ("5", "gpt-5"),
    ("5-mini", "gpt-5-mini"),
    ("5-nano", "gpt-5-nano"),
    ("4o", "gpt-4o"),
    ("gpt", "gpt-4o"),
    ("gp", "gpt-4o"),
    ("4o-mini", "gpt-4o-mini"),
    ("mini", "gpt-4o-mini"),
    ("gm", "gpt-4o-mini"),
    ("4.1", "gpt-4.1"),
    ("4.1-mini", "gpt-4.1-mini"),
    ("4.1-nano", "gpt-4.1-nano"),
    ("o3m", "o3-mini"),
    ("o4m", "o4-mini"),
    ("tts", "gpt-4o-mini-tts"),
    ("speech", "gpt-4o-mini-tts"),
    ("image", "gpt-image-1"),
    ("img", "gpt-image-1"),
    ("dalle", "dall-e-3"),
    ("dall-e", "dall-e-3"),
    ("transcribe", "gpt-4o-transcribe"),
    ("stt", "gpt-4o-transcribe"),
    ("whisper", "whisper-1"),
)

PERPLEXITY_MODELS = (
    ("s", "sonar"),
    ("pro", "sonar-pro"),
    ("sp", "sonar-pro"),
    ("reasoning", "sonar-reasoning"),
    ("sr", "sonar-reasoning"),
    ("reasoning-pro", "sonar-reasoning-pro"),
    ("srp", "sonar-reasoning-pro"),
    ("research", "sonar-deep-research"),
    ("dr", "sonar-deep-research"),
)

XAI_MODELS = (
    ("grok", "grok-4"),
    ("g", "grok-4"),
    ("g3", "grok-3"),
    ("mini", "grok-3-mini"),
    ("g3m", "grok-3-mini"),
    ("code", "grok-code-fast-1"),
    ("image", "grok-2-image-1212"),
    ("grok-2-image", "grok-2-image-1212"),
)


ALIAS_TABLES = {
    Provider.ANTHROPIC: ANTHROPIC_MODELS,
    Provider.CEREBRAS: CEREBRAS_MODELS,
    Provider.DEEPSEEK: DEEPSEEK_MODELS,
    Provider.GOOGLE: GOOGLE_MODELS,
    Provider.GROQ: GROQ_MODELS,
    Provider.OPENAI: OPENAI_MODELS,
    Provider.LLAMAFILE: (),
    Provider.OLLAMA: OLLAMA_MODELS,
    Provider.XAI: XAI_MODELS,
    Provider.PERPLEXITY: PERPLEXITY_MODELS,
}
