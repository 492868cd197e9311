def sanitize_user_input(text: str, max_length: int = 10000) -> str:
    """
    Clean free text typed by staff (notes, addresses, descriptions).

    Args:
        text: Input text to sanitize
        max_length: Maximum allowed length

    Returns:
        Text without NUL/control characters, cut to ``max_length``
    """
    if not text:
        return ""

    if len(text) > max_length:
        text = text[:max_length]

    # Keep line breaks and tabs, drop other control characters
    text = text.replace('\x00', '')
    text = ''.join(char for char in text if ord(char) >= 32 or char in '\n\r\t')

    return text
