import io

from activity_feed import ActivityEntry, ActivityObject, group_entries
from activity_render import ENTRY_RULE, SECTION_RULE, html_to_text, print_report
from issue_fields import IssueFields


def entry(id, updated, ticket, title="", content=""):
    return ActivityEntry(id=id, updated=updated, title=title, content=content,
                         target=ActivityObject(title=ticket))


def render(entries, resolve=None):
    out = io.StringIO()
    resolve = resolve or (lambda ticket: IssueFields("TPX-1", "JOB-1"))
    print_report(group_entries(entries), resolve, lambda t: f"https://jira/browse/{t}", out)
    return out.getvalue().splitlines()


def test_html_to_text():
    assert html_to_text('<p>Hello <b>world</b></p><p>a&amp;b&nbsp;c</p>') == "Hello world\na&b c"
    assert html_to_text("line<br/>next<br>last") == "line\nnext\nlast"
    assert html_to_text("<style>p {}</style><a href='x'>link</a>") == "link"
    assert html_to_text("") == ""


def test_html_to_text_collapses_blank_lines():
    assert html_to_text("<div>a</div><div></div><div></div><div></div><div>b</div>") == "a\n\nb"


def test_date_header_only_on_change():
    lines = render([
        entry("1", "2024-03-05T10:00:00Z", "T-1"),
        entry("2", "2024-03-05T11:00:00Z", "T-2"),
        entry("3", "2024-03-06T09:00:00Z", "T-3"),
    ])
    headers = [i for i, line in enumerate(lines) if line in ("2024-03-05", "2024-03-06")]
    assert [lines[i] for i in headers] == ["2024-03-05", "2024-03-06"]
    assert headers[0] == 0
    assert lines[headers[1] + 2].startswith("T-3\t")


def test_ticket_block_layout():
    lines = render([
        entry("1", "2024-03-05T10:00:00Z", "T-1", title="<b>John</b> updated", content="<p>done</p>"),
        entry("2", "2024-03-05T11:00:00Z", "T-1", title="John commented", content="ok"),
    ])
    assert lines == [
        "2024-03-05",
        SECTION_RULE,
        "T-1\thttps://jira/browse/T-1",
        "Topix number: TPX-1\t Job number: JOB-1",
        ENTRY_RULE,
        "John updated",
        ENTRY_RULE,
        "done",
        ENTRY_RULE,
        "John commented",
        ENTRY_RULE,
        "ok",
    ]


def test_resolves_each_group_in_order():
    asked = []

    def resolve(ticket):
        asked.append(ticket)
        return IssueFields("Missing", "")

    lines = render([
        entry("1", "2024-03-05T10:00:00Z", "T-2"),
        entry("2", "2024-03-05T11:00:00Z", "T-1"),
        entry("3", "2024-03-06T11:00:00Z", "T-2"),
    ], resolve)
    assert asked == ["T-2", "T-1", "T-2"]
    assert "Topix number: Missing\t Job number: " in lines
