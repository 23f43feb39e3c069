"""Prompt text and the response schema for income statement extraction."""

from finextract.models.financials import COMPLETENESS_VALUES

# Items whose absence must be reported in missing_line_items
REQUIRED_LINE_ITEMS = [
    "Revenue",
    "Total Expenses",
    "Profit Before Tax (PBT)",
    "Profit After Tax (PAT)",
]

SYSTEM_INSTRUCTION = f"""You are an expert Financial Data Extraction Agent. Your task is to extract the Statement of Profit & Loss (Income Statement) into a structured JSON format.

RULES:
1. SECTION FILTERING: Extract ONLY from Income Statement sections. Ignore Balance Sheets or Cash Flows.
2. MULTI-YEAR: Extract ALL visible reporting periods. Maintain column order.
3. NUMERIC RELIABILITY: Extract ONLY visible numbers. Do NOT compute totals. Remove commas. Keep decimals.
4. LINE ITEM STANDARDIZATION: Map original names to standard finance terms (e.g., "Revenue from ops" -> "Revenue from Operations").
5. MISSING COMPONENTS: Flag if {', '.join(REQUIRED_LINE_ITEMS[:-1])}, or {REQUIRED_LINE_ITEMS[-1]} are missing. List each one not found in missing_line_items.
"""

USER_PROMPT = "Extract the multi-year Income Statement from this document following the provided schema."

# Name of the tool the model is forced to call; its input is the extraction
EXTRACTION_TOOL_NAME = "record_income_statement"

RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "company_name": {"type": "string"},
        "currency": {"type": ["string", "null"]},
        "units": {"type": ["string", "null"]},
        "years": {"type": "array", "items": {"type": "string"}},
        "line_items": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "standardized_name": {"type": "string"},
                    "yearly_values": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "year": {"type": "string"},
                                "value": {"type": ["number", "null"]},
                            },
                            "required": ["year", "value"],
                        },
                    },
                },
                "required": ["name", "standardized_name", "yearly_values"],
            },
        },
        "missing_line_items": {"type": "array", "items": {"type": "string"}},
        "completeness": {"type": "string", "enum": list(COMPLETENESS_VALUES)},
    },
    "required": ["company_name", "years", "line_items", "missing_line_items", "completeness"],
}

EXTRACTION_TOOL = {
    "name": EXTRACTION_TOOL_NAME,
    "description": "Record the income statement extracted from the document.",
    "input_schema": RESPONSE_SCHEMA,
}
