"""Maps free-text marker names onto the fixed marker code vocabulary."""

MARKER_CODES = ("HBA1C", "GLU", "CHOL", "LDL", "HDL", "TG", "CREAT", "TSH", "HB", "WBC", "PLT")

# Evaluated top to bottom; the first matching substring wins. "hb" must stay
# below "hba1c" and "chol" below "ldl"/"hdl" ("LDL cholesterol" is LDL).
CODE_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("hba1c",), "HBA1C"),
    (("fasting", "glucose"), "GLU"),
    (("ldl",), "LDL"),
    (("hdl",), "HDL"),
    (("trig",), "TG"),
    (("chol",), "CHOL"),
    (("creat",), "CREAT"),
    (("tsh",), "TSH"),
    (("hb",), "HB"),
    (("wbc",), "WBC"),
    (("plate",), "PLT"),
)


def normalize_code(raw_name: str | None) -> str | None:
    if not isinstance(raw_name, str):
        return None
    name = raw_name.lower()
    for needles, code in CODE_RULES:
        if any(needle in name for needle in needles):
            return code
    return None


def resolve_code(code: str | None, raw_name: str | None) -> str | None:
    """Use a supplied code when it is part of the vocabulary, otherwise derive it from the name."""
    if isinstance(code, str) and code.upper() in MARKER_CODES:
        return code.upper()
    return normalize_code(raw_name)
