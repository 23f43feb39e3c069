"""Plain-text rendering of an extracted income statement."""

from finextract.models.financials import FinancialData

EMPTY_STATE_MESSAGE = "No income statement data was found in this document."


def _format_cell(value: float | None) -> str:
    if value is None:
        return "-"
    return f"{value:,.2f}"


def render_table(data: FinancialData) -> str:
    """
    Render a report as a fixed-width text table.

    Columns: Particulars (Original), Mapping, then one column per year.
    """
    lines = [
        f"{data.company_name}",
        f"Income Statement - {data.currency or 'Currency N/A'} ({data.units or 'Standard Units'}) [{data.completeness}]",
    ]

    if not data.has_data:
        lines.append(EMPTY_STATE_MESSAGE)
        return "\n".join(lines)

    name_width = max([len("Particulars (Original)")] + [len(i.name) for i in data.line_items])
    map_width = max([len("Mapping")] + [len(i.standardized_name) for i in data.line_items])
    year_widths = [
        max([len(year)] + [len(_format_cell(i.values.get(year))) for i in data.line_items])
        for year in data.years
    ]

    header = f"{'Particulars (Original)':<{name_width}}  {'Mapping':<{map_width}}"
    for year, width in zip(data.years, year_widths):
        header += f"  {year:>{width}}"
    lines.append("-" * len(header))
    lines.append(header)
    lines.append("-" * len(header))

    for item in data.line_items:
        row = f"{item.name:<{name_width}}  {item.standardized_name:<{map_width}}"
        for year, width in zip(data.years, year_widths):
            row += f"  {_format_cell(item.values.get(year)):>{width}}"
        lines.append(row)

    if data.missing_line_items:
        lines.append("")
        lines.append("Missing required items: " + ", ".join(data.missing_line_items))

    return "\n".join(lines)
