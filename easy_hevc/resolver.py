"""Interactive conflict resolution with run-scoped policy memos."""

from typing import Callable

from .formatting import format_size
from .models import (
    OversizedAction,
    OversizedAnswer,
    OversizedPolicy,
    ReconvertAnswer,
    ReconvertPolicy,
)


def confirm(question: str) -> bool:
    """Ask a yes/no question until a valid answer is given."""
    while True:
        answer = input(f"\n{question} [y/n]: ").strip().lower()
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        print("Invalid input. Please type 'y' or 'n'.")


def ask_reconvert(filename: str) -> ReconvertAnswer:
    """Prompt whether an already converted file should be converted again."""
    print(f"\nWarning: File \"{filename}\" was already converted by easy-hevc.")
    print("Do you want to re-convert it?")
    print("  [y] Yes (re-convert)")
    print("  [n] No (skip)")
    print("  [A] Yes to All")
    print("  [N] No to All")

    while True:
        choice = input("\nSelect option: ").strip()
        # Upper-case letters are the "to all" variants
        if choice == "A":
            return ReconvertAnswer.YES_ALL
        if choice == "N":
            return ReconvertAnswer.NO_ALL
        if choice.lower() in ("y", "yes"):
            return ReconvertAnswer.YES
        if choice.lower() in ("n", "no"):
            return ReconvertAnswer.NO
        print("Invalid option. Please try again.")


def ask_oversized(filename: str, original_size: int, converted_size: int) -> OversizedAnswer:
    """Prompt what to do with a converted file that is larger than its original."""
    print(f"\nWarning: Converted file \"{filename}\" is larger than the original!")
    print(f"  Original:  {format_size(original_size)}")
    print(f"  Converted: {format_size(converted_size)}")
    print("\nDo you want to delete the converted file instead?")
    print("  [y] Yes (delete converted, keep original)")
    print("  [n] No (delete original, keep converted)")
    print("  [s] Skip (keep both, do nothing)")
    print("  [A] Yes to All")
    print("  [N] No to All")
    print("  [S] Skip to All")

    while True:
        choice = input("\nSelect option: ").strip()
        if choice == "A":
            return OversizedAnswer.YES_ALL
        if choice == "N":
            return OversizedAnswer.NO_ALL
        if choice == "S":
            return OversizedAnswer.SKIP_ALL
        if choice.lower() in ("y", "yes"):
            return OversizedAnswer.YES
        if choice.lower() in ("n", "no"):
            return OversizedAnswer.NO
        if choice.lower() in ("s", "skip"):
            return OversizedAnswer.SKIP
        print("Invalid option. Please try again.")


def resolve_reconvert(
    policy: ReconvertPolicy,
    filename: str,
    ask: Callable[[str], ReconvertAnswer] = ask_reconvert,
) -> tuple[bool, ReconvertPolicy]:
    """
    Decide whether to re-convert a file that already carries provenance tags.

    Returns:
        Tuple of (re-convert?, updated policy)
    """
    if policy is ReconvertPolicy.NEVER:
        print("  Skipping previously converted file.")
        return False, policy
    if policy is ReconvertPolicy.ALWAYS:
        print("  Re-converting previously converted file.")
        return True, policy

    answer = ask(filename)
    if answer is ReconvertAnswer.NO:
        print("  Skipped by user.")
        return False, policy
    if answer is ReconvertAnswer.NO_ALL:
        print("  Skipping all future previously converted files.")
        return False, ReconvertPolicy.NEVER
    if answer is ReconvertAnswer.YES_ALL:
        return True, ReconvertPolicy.ALWAYS
    return True, policy


_ANSWER_ACTIONS = {
    OversizedAnswer.YES: OversizedAction.DELETE_CONVERTED,
    OversizedAnswer.YES_ALL: OversizedAction.DELETE_CONVERTED,
    OversizedAnswer.NO: OversizedAction.DELETE_ORIGINAL,
    OversizedAnswer.NO_ALL: OversizedAction.DELETE_ORIGINAL,
    OversizedAnswer.SKIP: OversizedAction.SKIP,
    OversizedAnswer.SKIP_ALL: OversizedAction.SKIP,
}

_ANSWER_POLICIES = {
    OversizedAnswer.YES_ALL: OversizedPolicy.DELETE_CONVERTED,
    OversizedAnswer.NO_ALL: OversizedPolicy.KEEP_CONVERTED,
    OversizedAnswer.SKIP_ALL: OversizedPolicy.SKIP_ALL,
}

_POLICY_ACTIONS = {
    OversizedPolicy.DELETE_CONVERTED: OversizedAction.DELETE_CONVERTED,
    OversizedPolicy.KEEP_CONVERTED: OversizedAction.DELETE_ORIGINAL,
    OversizedPolicy.SKIP_ALL: OversizedAction.SKIP,
}


def resolve_oversized(
    policy: OversizedPolicy,
    filename: str,
    original_size: int,
    converted_size: int,
    dry_run: bool = False,
    ask: Callable[[str, int, int], OversizedAnswer] = ask_oversized,
) -> tuple[OversizedAction, OversizedPolicy]:
    """
    Decide what to do with a converted file larger than its original.

    Dry runs never prompt and always skip; the policy is left unchanged.

    Returns:
        Tuple of (action, updated policy)
    """
    if dry_run:
        return OversizedAction.SKIP, policy

    if policy is not OversizedPolicy.ASK:
        return _POLICY_ACTIONS[policy], policy

    answer = ask(filename, original_size, converted_size)
    return _ANSWER_ACTIONS[answer], _ANSWER_POLICIES.get(answer, policy)
