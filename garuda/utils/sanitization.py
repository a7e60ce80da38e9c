import html
import re


# ==================================================
# Input Sanitization Utilities
# ==================================================
def sanitize_string(value: str) -> str:
    """
    Escape a string for safe inclusion in HTML.
    """
    if not isinstance(value, str):
        value = str(value)
    # 1. HTML Escape: Converts <script> to &lt;script&gt;
    value = html.escape(value)
    # 2. Remove escaped script blocks entirely
    value = re.sub(r"&lt;script.*?&gt;.*?&lt;/script&gt;", "", value, flags=re.DOTALL | re.IGNORECASE)
    # 3. Null Byte Removal
    value = value.replace("\0", "")
    return value
