"""Shared fixtures for the candi tests."""

from __future__ import annotations

import pytest

CASES_TABLE_HTML = """
<html>
<body>
    <h1>Bug Civil Court</h1>
    <table id="cases">
        <thead>
            <tr><th>Case</th><th>Parties</th><th>Filed</th><th>Tags</th></tr>
        </thead>
        <tbody>
            <tr>
                <td><a href="/cases/1">BCC-2020-001</a></td>
                <td>Ant v. Beetle</td>
                <td>Filed 2020-03-14</td>
                <td>contract; appeal</td>
            </tr>
            <tr>
                <td><a href="/cases/2">BCC-2021-017</a></td>
                <td>Cricket v. Dragonfly</td>
                <td>Filed 2021-11-02</td>
                <td>tort</td>
            </tr>
            <tr>
                <td><a href="/cases/3">BCC-2022-042</a></td>
                <td>Earwig</td>
                <td>Filed 2022-07-30</td>
                <td></td>
            </tr>
        </tbody>
    </table>
</body>
</html>
"""

CASES_HEADERS = [
    "case",
    "plaintiff,,defendant[[(\\w+) v\\. (\\w+)]]",
    "year//Filed (\\d{4})\\\\",
    "tags{{;\\s*}}",
]


@pytest.fixture
def cases_html() -> str:
    """A page holding one case table with a header row and three cases.

    Returns:
        The HTML text of the page.
    """
    return CASES_TABLE_HTML


@pytest.fixture
def cases_headers() -> list[str]:
    """Header templates matching the four columns of ``cases_html``.

    Returns:
        Norm, Multi, Transform and Split templates, in column order.
    """
    return list(CASES_HEADERS)
