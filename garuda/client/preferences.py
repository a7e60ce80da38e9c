from garuda.client.storage import THEME_KEY, KeyValueStore

THEMES = ("dharma", "forest")
DEFAULT_THEME = "dharma"


def load_theme(kv: KeyValueStore) -> str:
    theme = kv.get(THEME_KEY)
    return theme if theme in THEMES else DEFAULT_THEME


def save_theme(kv: KeyValueStore, theme: str) -> None:
    if theme not in THEMES:
        raise ValueError(f"unknown theme '{theme}'. available themes: {', '.join(THEMES)}")
    kv.set(THEME_KEY, theme)


def toggle_theme(theme: str) -> str:
    return "forest" if theme == "dharma" else "dharma"
