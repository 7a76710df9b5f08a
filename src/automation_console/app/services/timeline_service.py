"""Turn a workflow configuration into a plain-language timeline.

Steps are walked from the ones nobody feeds into (the starting points),
following connections depth-first. A step with more than one output becomes
a branch point whose paths are walked separately. Each step is described in
words a non-technical owner understands.
"""

from automation_console.app.models.workflow import TimelineBranch, TimelineStep

_TRIGGER_DESCRIPTIONS = {
    "shopifyTrigger": "Watches your Shopify store and starts the automation when something new happens (like a new customer or order)",
    "scheduleTrigger": "Runs this automation automatically on a set schedule",
    "webhook": "Starts when it receives a signal from another connected system",
    "webhookTrigger": "Starts when it receives a signal from another connected system",
    "formTrigger": "Starts when someone submits a form",
    "emailTrigger": "Starts when a new email arrives",
    "gmailTrigger": "Starts when a new email arrives",
}

_FIXED_DESCRIPTIONS = {
    # Logic
    "if": "Checks a condition and splits into two different paths, one if the answer is yes, one if no",
    "switch": "Routes the automation down different paths depending on a value",
    "filter": "Filters out items that don't meet the criteria, only keeping the ones that do",
    "merge": "Combines data coming from two different paths before continuing",
    # AI
    "openAi": "Uses OpenAI to generate or analyze text",
    "lmOpenAi": "Uses OpenAI to generate or analyze text",
    "openAiChat": "Uses OpenAI to generate or analyze text",
    "anthropic": "Uses Claude AI to write or analyze text",
    "lmChatAnthropic": "Uses Claude AI to write or analyze text",
    "agent": "An AI agent that thinks through a task and takes actions to complete it",
    "lmAgent": "An AI agent that thinks through a task and takes actions to complete it",
    # Data handling
    "code": "Runs a custom calculation or data transformation in the background",
    "set": "Organizes and prepares the data before sending it to the next step",
    "editFields": "Organizes and prepares the data before sending it to the next step",
    "splitInBatches": "Processes the data in smaller groups so nothing gets overloaded",
    "removeDuplicates": "Removes any duplicate entries from the data",
    # Communication
    "slack": "Sends a message to a Slack channel or person",
    "twilio": "Sends an SMS text message",
    "sendEmail": "Sends an email notification",
    "emailSend": "Sends an email notification",
    # Flow control
    "wait": "Pauses the automation and waits for a response or a set amount of time before continuing",
    "respondToWebhook": "Sends the final response and completes this run of the automation",
    "noOp": "A placeholder step that does nothing but keep the flow moving",
    "noop": "A placeholder step that does nothing but keep the flow moving",
}


def _describe_google_sheets(operation: str) -> str:
    if operation in ("append", "appendOrUpdate"):
        return "Saves the information as a new row in your Google Sheet"
    if operation in ("read", "getAll", "get"):
        return "Reads existing data from your Google Sheet"
    if operation == "update":
        return "Updates an existing entry in your Google Sheet"
    if operation == "lookup":
        return "Searches your Google Sheet for matching data"
    if operation == "delete":
        return "Removes a row from your Google Sheet"
    return "Works with data in your Google Sheet"


def _describe_gmail(operation: str) -> str:
    if operation in ("", "send", "sendEmail"):
        return "Sends an email via Gmail"
    if operation in ("get", "getAll"):
        return "Reads emails from Gmail"
    return "Works with Gmail"


def _describe_http_request(name: str, url: str) -> str:
    lowered = name.lower()
    if "vapi" in url or "call" in lowered or "phone" in lowered:
        return "Places an automated phone call through the AI calling system"
    if "shopify" in url:
        return "Sends a request to Shopify"
    return "Sends a request to an external service"


def _describe_shopify(operation: str) -> str:
    if operation == "create":
        return "Creates a new item in Shopify (like a blog post or product)"
    if operation == "update":
        return "Updates an existing item in Shopify"
    if operation in ("get", "getAll"):
        return "Retrieves data from Shopify"
    return "Works with your Shopify store"


def describe_step(node: dict) -> str:
    """Plain-language description of one workflow step."""
    node_type = str(node.get("type", "")).split(".")[-1]
    name = str(node.get("name", ""))
    params = node.get("parameters") or {}
    operation = str(params.get("operation") or "")

    if node_type in _TRIGGER_DESCRIPTIONS:
        return _TRIGGER_DESCRIPTIONS[node_type]
    if node_type in _FIXED_DESCRIPTIONS:
        return _FIXED_DESCRIPTIONS[node_type]
    if node_type == "googleSheets":
        return _describe_google_sheets(operation)
    if node_type == "gmail":
        return _describe_gmail(operation)
    if node_type == "httpRequest":
        return _describe_http_request(name, str(params.get("url") or ""))
    if node_type == "shopify":
        return _describe_shopify(operation)
    return name or node_type


def _main_outputs(connections: dict, node_name: str) -> list[list[dict]]:
    return (connections.get(node_name) or {}).get("main") or []


def build_timeline(workflow: dict) -> list[TimelineStep]:
    """Build the ordered step list for a workflow configuration."""
    nodes = [n for n in workflow.get("nodes") or [] if "stickyNote" not in str(n.get("type", ""))]
    if not nodes:
        return []

    connections = workflow.get("connections") or {}
    nodes_by_name = {n.get("name"): n for n in nodes}

    has_incoming = set()
    for node_connections in connections.values():
        for output in (node_connections or {}).get("main") or []:
            for link in output or []:
                has_incoming.add(link.get("node"))

    start_nodes = [n for n in nodes if n.get("name") not in has_incoming] or nodes[:1]
    visited: set[str] = set()

    def walk(node_name: str) -> list[TimelineStep]:
        if node_name in visited or node_name not in nodes_by_name:
            return []
        visited.add(node_name)

        node = nodes_by_name[node_name]
        outputs = _main_outputs(connections, node_name)
        step = TimelineStep(
            id=str(node.get("id", "")),
            name=str(node.get("name", "")),
            description=describe_step(node),
            is_branch_point=len(outputs) > 1,
        )

        if not outputs:
            return [step]
        if len(outputs) == 1:
            rest = [s for link in outputs[0] or [] for s in walk(link.get("node"))]
            return [step, *rest]

        is_if = ".if" in str(node.get("type", ""))
        branches = []
        for index, output in enumerate(outputs):
            if is_if:
                label = "If YES" if index == 0 else "If NO"
            else:
                label = f"Path {index + 1}"
            branch_steps = [s for link in output or [] for s in walk(link.get("node"))]
            branches.append(TimelineBranch(label=label, steps=branch_steps))
        step.branches = branches
        return [step]

    return [s for n in start_nodes for s in walk(n.get("name"))]
