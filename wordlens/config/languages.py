"""Language-specific configurations."""

# ISO-ish code -> language name used in prompts
LANGUAGE_NAMES = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
}

# Speech locale -> OpenAI TTS voice
OPENAI_VOICES = {
    "en-US": "alloy",
    "en-GB": "echo",
    "es-ES": "fable",
    "es-MX": "onyx",
    "fr-FR": "nova",
    "de-DE": "shimmer",
    "it-IT": "alloy",
    "pt-BR": "echo",
    "ja-JP": "fable",
    "ko-KR": "onyx",
    "zh-CN": "nova",
}

OPENAI_AVAILABLE_VOICES = ["alloy", "echo", "fable", "onyx", "nova", "shimmer"]

# Speech locale -> Edge TTS neural voice
EDGE_VOICES = {
    "en-US": "en-US-AriaNeural",
    "en-GB": "en-GB-SoniaNeural",
    "es-ES": "es-ES-ElviraNeural",
    "es-MX": "es-MX-DaliaNeural",
    "fr-FR": "fr-FR-DeniseNeural",
    "de-DE": "de-DE-ConradNeural",
    "it-IT": "it-IT-ElsaNeural",
    "pt-BR": "pt-BR-FranciscaNeural",
    "ja-JP": "ja-JP-NanamiNeural",
    "ko-KR": "ko-KR-SunHiNeural",
    "zh-CN": "zh-CN-XiaoxiaoNeural",
}

# Placeholder sentences, one per phrase category, in category order.
# "{word}" is substituted with the looked-up word.
PHRASE_TEMPLATES = {
    "en": [
        "The {word} was beautiful in the morning light.",
        "I need to find a good {word} for this project.",
        "Have you ever seen such an amazing {word}?",
        "The {word} reminded me of my childhood.",
        "Can you help me understand this {word} better?",
    ],
    "es": [
        "El/La {word} era hermoso/a en la luz de la mañana.",
        "Necesito encontrar un/a buen/a {word} para este proyecto.",
        "¿Alguna vez has visto un/a {word} tan increíble?",
        "El/La {word} me recordó mi infancia.",
        "¿Puedes ayudarme a entender mejor este/a {word}?",
    ],
    "fr": [
        "Le/La {word} était beau/belle dans la lumière du matin.",
        "J'ai besoin de trouver un/une bon/bonne {word} pour ce projet.",
        "Avez-vous déjà vu un/une {word} si incroyable?",
        "Le/La {word} m'a rappelé mon enfance.",
        "Pouvez-vous m'aider à mieux comprendre ce/cette {word}?",
    ],
    "de": [
        "Der/Die/Das {word} war wunderschön im Morgenlicht.",
        "Ich muss ein gutes {word} für dieses Projekt finden.",
        "Hast du jemals so ein erstaunliches {word} gesehen?",
        "Das {word} erinnerte mich an meine Kindheit.",
        "Kannst du mir helfen, dieses {word} besser zu verstehen?",
    ],
    "pt": [
        "O/A {word} estava lindo/a na luz da manhã.",
        "Preciso encontrar um/a bom/boa {word} para este projeto.",
        "Você já viu um/a {word} tão incrível?",
        "O/A {word} me lembrou da minha infância.",
        "Você pode me ajudar a entender melhor este/a {word}?",
    ],
    "it": [
        "Il/La {word} era bellissimo/a nella luce del mattino.",
        "Devo trovare un/una buon/buona {word} per questo progetto.",
        "Hai mai visto un/una {word} così incredibile?",
        "Il/La {word} mi ha ricordato la mia infanzia.",
        "Puoi aiutarmi a capire meglio questo/a {word}?",
    ],
}


def language_name(code: str, default: str = "English") -> str:
    """Resolve a language code (``"es"`` or ``"es-ES"``) to its name."""
    if not code:
        return default
    return LANGUAGE_NAMES.get(code.split("-")[0].lower(), default)
