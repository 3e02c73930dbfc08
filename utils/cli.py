"""CLI utility functions for user interaction."""
import sys

from browser_agent.models import ReasoningResult, Termination


def read_user_goal(prompt: str = "🤖 Ask about this page: ") -> str:
    """Read a query from user input via stdin."""
    print(prompt, end="", flush=True)
    line = sys.stdin.readline()
    if not line:  # EOF
        raise KeyboardInterrupt

    goal = line.strip()
    if goal.lower() in {"bye", "quit", "exit", "q"}:
        raise KeyboardInterrupt

    return goal


def print_result(result: ReasoningResult) -> None:
    """Print the reasoning result to stdout."""
    if result.success:
        print(f"✅ **Answer:** {result.final_answer}")

        if result.tool_calls:
            print(f"\n📋 **Used {len(result.tool_calls)} tool(s) in {result.iterations} iteration(s):**")
            for i, call in enumerate(result.tool_calls, 1):
                argument = f"({call['argument']})" if call.get("argument") else ""
                print(f"  {i}. {call['tool']}{argument} [{call['status']}]")
    elif result.termination is Termination.ITERATION_LIMIT_REACHED:
        print(f"⏹️ **Stopped after {result.iterations} iteration(s) without a final answer.**")
        print(result.transcript)
    else:
        print("❌ **Failed**")
        if result.error_message:
            print(f"   Error: {result.error_message}")
