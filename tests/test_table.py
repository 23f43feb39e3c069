from finextract.generators.table import EMPTY_STATE_MESSAGE, render_table
from finextract.models.financials import FinancialData


def test_render_table(acme_data):
    text = render_table(acme_data)
    lines = text.splitlines()

    assert lines[0] == "Acme Industries Ltd"
    assert lines[1] == "Income Statement - INR (Lakhs) [Partial]"
    assert "Particulars (Original)" in lines[3] and "FY2023" in lines[3]
    assert "1,500.50" in text
    assert lines[-1] == "Missing required items: Total Expenses"
    assert EMPTY_STATE_MESSAGE not in text


def test_render_empty_state():
    text = render_table(FinancialData(company_name="Nothing Co", completeness="Not Found"))

    assert "Currency N/A (Standard Units)" in text
    assert text.endswith(EMPTY_STATE_MESSAGE)
