from doppel_core.errors import DomainError


class SynthesisFailure(DomainError):
    code = "synthesis_failure"
    status = 502


class DialogueFailure(DomainError):
    code = "dialogue_failure"
    status = 502
