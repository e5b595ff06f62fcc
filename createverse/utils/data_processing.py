import re

# C0 and C1 controls, BOM, zero-width space/joiners and the word joiner
INVISIBLE_CHARS = re.compile(r'[\x00-\x1F\x7F-\x9F\uFEFF\u200B-\u200D\u2060]')
WHITESPACE_RUN = re.compile(r'\s+')


def sanitize_identifier(raw):
    """
    Normalize a scanned or typed identifier into its canonical form.

    Examples:
        '  7f\u200b001  ' -> '7f001'
        'A 10  01'       -> 'A 10 01'
        '\ufeff\u200d'   -> ''

    Control characters are dropped, not turned into spaces. An empty result
    means the input carried no usable identifier.
    """
    if raw is None:
        return ""

    value = str(raw).strip()
    value = INVISIBLE_CHARS.sub('', value)
    value = WHITESPACE_RUN.sub(' ', value)

    return value.strip()


def clean_mobile(mobile):
    """
    Keep only the digits of a mobile number
    Examples:
        '98765 43210'  -> '9876543210'
        '+91-98765-43210' -> '919876543210'
    """
    if not mobile:
        return ""

    return re.sub(r'\D', '', str(mobile))


def clean_email(email):
    """
    Clean and normalize email addresses
    - Convert to lowercase
    - Remove leading/trailing whitespace
    """
    if not email:
        return ""

    return str(email).strip().lower()


def normalize_name(name):
    """
    Normalize name formatting
    - Remove extra spaces
    - Proper capitalization
    """
    if not name:
        return ""

    name = WHITESPACE_RUN.sub(' ', str(name).strip())

    return name.title()


def clean_text_field(text):
    """
    General text field cleaning
    - Remove leading/trailing whitespace
    - Replace multiple spaces with single space
    """
    if text is None or text == "":
        return ""

    return WHITESPACE_RUN.sub(' ', str(text).strip())
