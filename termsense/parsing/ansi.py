from __future__ import annotations

import re

# CSI introduced by ESC or the single-byte C1 form (0x9B), optional private
# markers, numeric params, then one final byte from a fixed set
_ANSI_CSI_RE = re.compile(
    r"[\x1b\x9b]"
    r"[\[()#;?]*"
    r"(?:[0-9]{1,4}(?:;[0-9]{0,4})*)?"
    r"[0-9A-ORZcf-nqry=><]"
)

_INTRODUCER_RE = re.compile(r"[\x1b\x9b]")
_INTRODUCERS = frozenset("\x1b\x9b")
_MARKERS = frozenset("[()#;?")
_DIGITS = frozenset("0123456789")
_FINALS = frozenset("ABCDEFGHIJKLMNORZcfghijklmnqry=><")  # besides digits
_MAX_PARAM_DIGITS = 4

_SERVER_URL_RE = re.compile(r"https?://(?:localhost|127\.0\.0\.1):\d+", re.IGNORECASE)


def strip_ansi(text: str) -> str:
    """Strip ANSI escape sequences from terminal output.

    The result never contains a sequence, including one that only forms
    once an inner sequence is cut out (``ESC ESC[31m [0m`` strips to the
    empty string), so stripping twice gives the same text as stripping once.

    Sequences are tracked in one left-to-right pass. Every open sequence is
    kept on a stack with its start offset in the output. A complete one is
    cut from the output and the sequence below it resumes where it stopped,
    so the work stays linear in the input even for deeply nested escapes.
    Parameters are matched greedily, as :data:`_ANSI_CSI_RE` would.

    Args:
        text: Raw terminal output, possibly containing color codes.

    Returns:
        The text with every recognized escape sequence removed.
    """
    if _ANSI_CSI_RE.search(text) is None:
        return text

    out: list[str] = []
    # [start offset in out, digits in the current param group or None while
    # still reading markers, offset of the last digit]
    open_seqs: list[list] = []
    # characters handed back after a greedy match fell short, next one last
    pending: list[str] = []
    pos = 0
    end = len(text)

    while True:
        if pending:
            ch = pending.pop()
        elif pos < end:
            if not open_seqs:
                found = _INTRODUCER_RE.search(text, pos)
                nxt = found.start() if found else end
                out.extend(text[pos:nxt])
                pos = nxt
                if pos == end:
                    break
            ch = text[pos]
            pos += 1
        elif open_seqs:
            ch = None
        else:
            break

        if not open_seqs:
            out.append(ch)
            if ch in _INTRODUCERS:
                open_seqs.append([len(out) - 1, None, -1])
            continue

        seq = open_seqs[-1]
        start, digits, last_digit = seq

        if digits is None:
            if ch in _MARKERS:
                out.append(ch)
            elif ch in _DIGITS:
                out.append(ch)
                seq[1] = 1
                seq[2] = len(out) - 1
            elif ch in _FINALS:
                del out[start:]
                open_seqs.pop()
            elif ch in _INTRODUCERS:
                out.append(ch)
                open_seqs.append([len(out) - 1, None, -1])
            else:
                # this sequence can no longer complete, and every one below
                # it now has a stray byte inside its body
                if ch is not None:
                    out.append(ch)
                open_seqs.clear()
            continue

        if ch in _DIGITS and digits < _MAX_PARAM_DIGITS:
            out.append(ch)
            seq[1] = digits + 1
            seq[2] = len(out) - 1
        elif ch == ";":
            out.append(ch)
            seq[1] = 0
        elif ch in _DIGITS or ch in _FINALS:
            del out[start:]
            open_seqs.pop()
        else:
            # the last digit read becomes the final byte
            if ch is not None:
                pending.append(ch)
            pending.extend(reversed(out[last_digit + 1:]))
            del out[start:]
            open_seqs.pop()

    return "".join(out)


def find_server_url(text: str) -> str | None:
    """Return the first local ``http(s)://host:port`` URL in clean text."""
    match = _SERVER_URL_RE.search(text)
    return match.group(0) if match else None
