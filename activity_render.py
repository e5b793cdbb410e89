import html
import re
import sys

SECTION_RULE = "=" * 64
ENTRY_RULE = "-" * 64

_DROP_BLOCKS = re.compile(r"<(script|style)\b.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_LINE_BREAKS = re.compile(r"<br\s*/?>|</(p|div|li|tr|h[1-6]|blockquote|pre)\s*>", re.IGNORECASE)
_TAGS = re.compile(r"<[^>]+>")
_SPACES = re.compile(r"[ \t\r\f\v]+")
_BLANK_RUNS = re.compile(r"\n{3,}")


def html_to_text(fragment):
    """Plain-text rendering of an HTML fragment from the activity stream."""
    if not fragment:
        return ""
    text = _DROP_BLOCKS.sub("", fragment)
    text = _LINE_BREAKS.sub("\n", text)
    text = _TAGS.sub("", text)
    text = html.unescape(text).replace("\xa0", " ")
    lines = [_SPACES.sub(" ", line).strip() for line in text.split("\n")]
    return _BLANK_RUNS.sub("\n\n", "\n".join(lines)).strip()


def print_ticket(ticket, fields, entries, browse_url, out):
    print(SECTION_RULE, file=out)
    print(f"{ticket}\t{browse_url}", file=out)
    print(f"Topix number: {fields.topix_number}\t Job number: {fields.job_number}", file=out)
    for entry in entries:
        print(ENTRY_RULE, file=out)
        print(html_to_text(entry.title), file=out)
        print(ENTRY_RULE, file=out)
        print(html_to_text(entry.content), file=out)


def print_report(groups, resolve, browse_url, out=None):
    """
    Print every group in key order.

    ``resolve`` maps a ticket to its IssueFields and ``browse_url`` a ticket to
    its page; a date line is printed whenever the date differs from the
    previous group's.
    """
    out = out or sys.stdout
    date = None
    for key, entries in groups.items():
        if key.date != date:
            print(key.date, file=out)
            date = key.date
        print_ticket(key.ticket, resolve(key.ticket), entries, browse_url(key.ticket), out)
