from user_console.app.application.operation_tickets import OperationTicket
from user_console.app.ui.components.error_banner import ErrorBanner


def print_mutation_success(operation: str, ticket: OperationTicket) -> None:
    if ticket.removed_ids:
        ids = ", ".join(str(user_id) for user_id in sorted(ticket.removed_ids))
        print(f"[success] operation={operation} removed={ids}")
        return
    record = ticket.record
    if record is not None:
        print(f"[success] operation={operation} id={record.id} name={record.name} email={record.email}")
        return
    print(f"[success] operation={operation}")


def print_mutation_error(operation: str, ticket: OperationTicket) -> None:
    code = getattr(ticket.error, "code", None) or "ERROR"
    print(f"[mutation-error] operation={operation} code={code}")
    ErrorBanner.show(ticket.error_detail or "Operation failed.")
