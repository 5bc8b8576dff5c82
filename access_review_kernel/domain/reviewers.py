"""
Reviewer bindings (``access_review_kernel.domain.reviewers``).

Responsibility
--------------
Maps each reviewable field to the one identity class allowed to write it.
Bindings are data: the Validator and Recommender stages are bound to
usernames, the final decision and the signed artifact to role strings.
Nothing here hardcodes a person.

Architecture position
---------------------
**Kernel domain layer** -- pure.  Built from configuration by
``access_review_config.bridges.build_reviewer_bindings``.
"""

from __future__ import annotations

from dataclasses import dataclass

from access_review_kernel.domain.submission import ActorIdentity, ReviewField


@dataclass(frozen=True)
class ReviewerBindings:
    """Who may act on which field.

    ``file_roles`` governs attaching/removing the signed artifact and
    falls back to ``approver_roles`` when empty.
    """

    validator_usernames: frozenset[str]
    recommender_usernames: frozenset[str]
    approver_roles: frozenset[str]
    file_roles: frozenset[str] = frozenset()
    account_admin_roles: frozenset[str] = frozenset()

    def identities_for(self, field: ReviewField) -> tuple[str, frozenset[str]]:
        """Return ``("username" | "role", allowed values)`` for a field."""
        if field is ReviewField.VALIDATOR_STATUS:
            return "username", self.validator_usernames
        if field is ReviewField.RECOMMENDER_STATUS:
            return "username", self.recommender_usernames
        if field is ReviewField.FINAL_STATUS:
            return "role", self.approver_roles
        return "role", self.file_roles or self.approver_roles


def can_act_on(
    bindings: ReviewerBindings,
    actor: ActorIdentity,
    field: ReviewField,
) -> bool:
    """Authorization check: is ``actor`` bound to ``field``?

    Record state plays no part here; final-approval preconditions are
    checked by ``apply_transition``.
    """
    kind, allowed = bindings.identities_for(field)
    if kind == "username":
        return actor.username in allowed
    return actor.role in allowed


def fields_for(bindings: ReviewerBindings, actor: ActorIdentity) -> tuple[ReviewField, ...]:
    """All fields the actor may act on, in ReviewField order."""
    return tuple(f for f in ReviewField if can_act_on(bindings, actor, f))
