from ..core.data_models import Flow

def format_flow(flow: Flow) -> str:
    """Creates a human-readable outline of a flow's questions and connections."""

    output = [
        "==================================================",
        f"Flow: {flow.id or '(unsaved)'}",
        f"Questions: {len(flow.nodes)} | Connections: {len(flow.edges)}",
        "--------------------------------------------------",
    ]

    if not flow.nodes:
        output.append("  No questions yet.")

    for node in flow.nodes:
        output.append(f"[{node.id}] {node.label}")
        outgoing = [edge for edge in flow.edges if edge.source == node.id]

        for index, response in enumerate(node.responses):
            targets = [
                edge.target for edge in outgoing
                if edge.source_response == index
                or (edge.source_response is None and edge.label == response)
            ]
            arrow = f" -> {', '.join(targets)}" if targets else ""
            output.append(f"    {index}. {response}{arrow}")

        for edge in outgoing:
            if edge.source_handle is None:
                output.append(f"    * -> {edge.target}")

    output.append("==================================================")
    return "\n".join(output)
