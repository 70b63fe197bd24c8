"""
Localised strings, one YAML table per language in lang/.
"""

import os

import yaml

LANG_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "lang")
FALLBACK = "en"

_cache = {}


def available():
    return sorted(
        os.path.splitext(name)[0]
        for name in os.listdir(LANG_DIR)
        if name.endswith(".yaml")
    )


def get_hash(lang):
    """
    Strings for `lang` ("fr", "fr_FR", "fr-FR" all map to fr.yaml).

    Keys missing from the language table are filled in from English.
    """
    code = lang.replace("-", "_").split("_")[0].lower()
    if code not in available():
        code = FALLBACK
    if code not in _cache:
        table = dict(_load(FALLBACK))
        if code != FALLBACK:
            table.update(_load(code))
        _cache[code] = table
    return dict(_cache[code])


def _load(code):
    with open(os.path.join(LANG_DIR, f"{code}.yaml"), encoding="utf-8") as f:
        return yaml.safe_load(f) or {}
