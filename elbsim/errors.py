from __future__ import annotations


class ELBError(Exception):
    """A provider error, returned to the caller as an ``ErrorResponse``."""

    def __init__(self, code: str, message: str, status_code: int = 400) -> None:
        super().__init__(f"{code}: {message}")
        self.status_code = status_code
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"ELBError(code={self.code!r}, message={self.message!r}, status_code={self.status_code})"


def unrecognized_action() -> ELBError:
    return ELBError("InvalidParameterValue", "Unrecognized Action")


def validation_error(message: str) -> ELBError:
    return ELBError("ValidationError", message)


def load_balancer_not_found(name: str) -> ELBError:
    return ELBError("LoadBalancerNotFound", f"There is no ACTIVE Load Balancer named '{name}'")


def invalid_instance(instance_id: str) -> ELBError:
    return ELBError("InvalidInstance", f'InvalidInstance found in [{instance_id}]. Invalid id: "{instance_id}"')
