"""Tool definitions for LLM function calling against the Injaz records.

Each schema is plain JSON schema; the Gemini client converts them into
function declarations.
"""

from typing import Any

# === Payment Tools ===

CREATE_PAYMENT_TOOL: dict[str, Any] = {
    "name": "create_payment",
    "description": (
        "Create a new payment. direction must be INBOUND (money received) or "
        "OUTBOUND (money paid out). Unknown parties are created automatically."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "direction": {
                "type": "string",
                "enum": ["INBOUND", "OUTBOUND"],
                "description": "INBOUND or OUTBOUND",
            },
            "party_name": {"type": "string", "description": "Name of the vendor or client"},
            "amount": {"type": "number", "description": "Payment amount"},
            "description": {"type": "string", "description": "Payment description"},
            "category": {"type": "string", "description": "Payment category"},
            "date": {"type": "string", "description": "Payment date YYYY-MM-DD"},
        },
        "required": ["direction", "party_name", "amount"],
    },
}

CREATE_DRAFT_PAYMENT_TOOL: dict[str, Any] = {
    "name": "create_draft_payment",
    "description": (
        "Create a draft payment from a voice note or manual input. Drafts are "
        "flagged for review and do not count as real payments until a person "
        "confirms them. Use this when the user describes a payment by voice or "
        "wants to stage a payment for review."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "direction": {
                "type": "string",
                "enum": ["INBOUND", "OUTBOUND"],
                "description": "INBOUND (money received) or OUTBOUND (money paid out)",
            },
            "party_name": {
                "type": "string",
                "description": "Name of the vendor or client (can be approximate from voice)",
            },
            "amount": {"type": "number", "description": "Payment amount"},
            "description": {"type": "string", "description": "Payment description"},
            "category": {"type": "string", "description": "Payment category"},
            "date": {"type": "string", "description": "Payment date YYYY-MM-DD"},
            "voice_transcript": {
                "type": "string",
                "description": "Original voice transcription text",
            },
        },
        "required": ["direction", "amount"],
    },
}

LOOKUP_FINANCIALS_TOOL: dict[str, Any] = {
    "name": "lookup_financials",
    "description": (
        "Look up financial info. type is summary (completed revenue, expenses "
        "and net profit), recent_payments (the 10 newest payments) or "
        "party_balance (money in and out for one party)."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "type": {
                "type": "string",
                "enum": ["summary", "recent_payments", "party_balance"],
                "description": "summary, recent_payments, or party_balance",
            },
            "party_name": {"type": "string", "description": "Party name for balance lookup"},
        },
        "required": ["type"],
    },
}

# === Task & Project Tools ===

CREATE_TASK_TOOL: dict[str, Any] = {
    "name": "create_task",
    "description": "Create a new task, optionally linked to a project and assigned to a team member.",
    "input_schema": {
        "type": "object",
        "properties": {
            "title": {"type": "string", "description": "Task title"},
            "description": {"type": "string", "description": "Task description"},
            "project_name": {"type": "string", "description": "Project name to link to"},
            "assignee_name": {"type": "string", "description": "Person to assign to"},
            "priority": {
                "type": "string",
                "enum": ["Low", "Medium", "High", "Urgent"],
                "description": "Low, Medium, High, or Urgent",
            },
            "due_date": {"type": "string", "description": "Due date YYYY-MM-DD"},
        },
        "required": ["title"],
    },
}

LIST_PROJECTS_TOOL: dict[str, Any] = {
    "name": "list_projects",
    "description": "List the most recent projects with their status and task counts.",
    "input_schema": {"type": "object", "properties": {}, "required": []},
}

LIST_TASKS_TOOL: dict[str, Any] = {
    "name": "list_tasks",
    "description": "List the most recent tasks, optionally filtered by status or assignee.",
    "input_schema": {
        "type": "object",
        "properties": {
            "status": {"type": "string", "description": "Filter by status, e.g. To Do or Done"},
            "assignee_name": {"type": "string", "description": "Filter by assignee name"},
        },
        "required": [],
    },
}

# === Party Tools ===

LOOKUP_PARTY_TOOL: dict[str, Any] = {
    "name": "lookup_party",
    "description": "Search for a vendor, client, or employee by name.",
    "input_schema": {
        "type": "object",
        "properties": {
            "name": {"type": "string", "description": "Name to search for"},
            "type": {
                "type": "string",
                "enum": ["CLIENT", "VENDOR", "EMPLOYEE"],
                "description": "CLIENT, VENDOR, or EMPLOYEE",
            },
        },
        "required": ["name"],
    },
}

CREATE_PARTY_TOOL: dict[str, Any] = {
    "name": "create_party",
    "description": "Create a new vendor, client, or employee.",
    "input_schema": {
        "type": "object",
        "properties": {
            "name": {"type": "string", "description": "Party name"},
            "type": {
                "type": "string",
                "enum": ["CLIENT", "VENDOR", "EMPLOYEE"],
                "description": "CLIENT, VENDOR, or EMPLOYEE",
            },
            "email": {"type": "string", "description": "Email address"},
            "phone": {"type": "string", "description": "Phone number"},
        },
        "required": ["name", "type"],
    },
}

# === Document Tools ===

CREATE_DOCUMENT_TOOL: dict[str, Any] = {
    "name": "create_document",
    "description": "Create a quotation, invoice, purchase order, or vendor bill with line items.",
    "input_schema": {
        "type": "object",
        "properties": {
            "type": {
                "type": "string",
                "enum": ["QUOTATION", "INVOICE", "PURCHASE_ORDER", "VENDOR_BILL"],
                "description": "QUOTATION, INVOICE, PURCHASE_ORDER, or VENDOR_BILL",
            },
            "party_name": {"type": "string", "description": "Client or vendor name"},
            "project_name": {"type": "string", "description": "Project to link to"},
            "line_items": {
                "type": "string",
                "description": "JSON array of {description, quantity, unit_price}",
            },
            "vat_rate": {"type": "number", "description": "VAT rate as decimal, e.g. 0.14"},
            "notes": {"type": "string", "description": "Notes"},
        },
        "required": ["type", "party_name", "line_items"],
    },
}

# === Reporting Tools ===

GET_DASHBOARD_TOOL: dict[str, Any] = {
    "name": "get_dashboard",
    "description": (
        "Get dashboard stats: total revenue, expenses, net profit, party count "
        "and project count."
    ),
    "input_schema": {"type": "object", "properties": {}, "required": []},
}


ALL_TOOLS: list[dict[str, Any]] = [
    CREATE_PAYMENT_TOOL,
    CREATE_TASK_TOOL,
    LOOKUP_FINANCIALS_TOOL,
    LOOKUP_PARTY_TOOL,
    CREATE_PARTY_TOOL,
    LIST_PROJECTS_TOOL,
    LIST_TASKS_TOOL,
    CREATE_DOCUMENT_TOOL,
    GET_DASHBOARD_TOOL,
    CREATE_DRAFT_PAYMENT_TOOL,
]

TOOL_NAMES: frozenset[str] = frozenset(tool["name"] for tool in ALL_TOOLS)
