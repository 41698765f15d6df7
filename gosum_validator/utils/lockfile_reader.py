from typing import Union


def parse_lockfile_lines(data: Union[bytes, str]) -> list[str]:
    """Split raw lockfile content into lines.

    Lines end at ``\\n``; a ``\\r`` right before it is dropped too. A final
    terminator does not produce an extra empty line, while blank lines inside
    the content are kept (callers decide what to do with them). Bytes that are
    not valid UTF-8 are replaced rather than rejected.

    Args:
        data: Lockfile content as read from a request body or a download.

    Returns:
        list[str]: Lines in file order, without terminators.
    """
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")

    lines = data.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]
