"""LangGraph workflow definition for a single upload.

Stages run strictly in order; any stage that rejects or fails routes straight to
`report`, which derives the final status from what the state holds.
"""
from langgraph.graph import StateGraph, END

from src.core.workflow_state import IntakeState
from src.nodes.admit import AdmitNode
from src.nodes.persist import PersistNode
from src.nodes.check_format import CheckFormatNode
from src.nodes.extract import ExtractNode
from src.nodes.review import ReviewNode
from src.nodes.report import ReportNode


def should_continue_after_admit(state: IntakeState) -> str:
    """Route after admission: store the file or report the rejection."""
    if state.get("admitted", False):
        return "persist"
    return "report"


def should_continue_after_persist(state: IntakeState) -> str:
    """Route after storage: photos stop here, PDF orders go on to the format check."""
    if state.get("error_stage"):
        return "report"
    if state["profile"].requires_extraction:
        return "check_format"
    return "report"


def should_continue_after_check_format(state: IntakeState) -> str:
    """Route after the header check: never run extraction on a non-PDF."""
    if state.get("format_valid", False):
        return "extract"
    return "report"


def should_continue_after_extract(state: IntakeState) -> str:
    if state.get("error_stage"):
        return "report"
    return "review"


def build_graph(
    admit_node: AdmitNode,
    persist_node: PersistNode,
    check_format_node: CheckFormatNode,
    extract_node: ExtractNode,
    review_node: ReviewNode,
    report_node: ReportNode,
):
    """Build and compile the intake graph.

    Graph structure:
        admit → (admitted?) → persist → (extract?) → check_format → (pdf?) → extract → review → report
              ↘ report               ↘ report                   ↘ report          ↘ report

    Returns a compiled LangGraph; run it with `await graph.ainvoke(state)`.
    """
    graph = StateGraph(IntakeState)

    graph.add_node("admit", admit_node)
    graph.add_node("persist", persist_node)
    graph.add_node("check_format", check_format_node)
    graph.add_node("extract", extract_node)
    graph.add_node("review", review_node)
    graph.add_node("report", report_node)

    graph.set_entry_point("admit")

    graph.add_conditional_edges(
        "admit",
        should_continue_after_admit,
        {"persist": "persist", "report": "report"},
    )
    graph.add_conditional_edges(
        "persist",
        should_continue_after_persist,
        {"check_format": "check_format", "report": "report"},
    )
    graph.add_conditional_edges(
        "check_format",
        should_continue_after_check_format,
        {"extract": "extract", "report": "report"},
    )
    graph.add_conditional_edges(
        "extract",
        should_continue_after_extract,
        {"review": "review", "report": "report"},
    )

    graph.add_edge("review", "report")
    graph.add_edge("report", END)

    return graph.compile()
