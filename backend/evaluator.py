from terms import fallback_term_label

TOOLTIP_PREFIX = "Missing Prerequisite: "


def evaluate_course(
    item: dict,
    groups: list[list[str]],
    course_to_index: dict[str, int],
    term_index_to_label: dict[int, str],
    history: set[str],
) -> dict:
    """
    Checks one scheduled course against its prerequisite groups.

    An option satisfies its group when it is in history or scheduled in an
    earlier term. An option scheduled in a later term never satisfies and is
    reported as a later mention.

    Returns:
      {
        "missing_groups": [["CS 261", "CS 261H"]],
        "later_mentions": [{"code": "CS 261", "term": "Spring 2027"}],
      }
    """
    term_index = item["term_index"]
    missing_groups: list[list[str]] = []
    later_mentions: list[dict] = []

    for group in groups:
        group_satisfied = False
        for option in group:
            option_index = course_to_index.get(option)
            if option_index is not None and option_index > term_index:
                later_mentions.append({
                    "code": option,
                    "term": term_index_to_label.get(option_index) or fallback_term_label(option_index),
                })
                continue
            if option in history or (option_index is not None and option_index < term_index):
                group_satisfied = True
                break
        if not group_satisfied:
            missing_groups.append(group)

    return {"missing_groups": missing_groups, "later_mentions": later_mentions}


def is_compliant(verdict: dict) -> bool:
    return not verdict["missing_groups"] and not verdict["later_mentions"]


def badge_tooltip(verdict: dict) -> str | None:
    """'Missing Prerequisite: CS 261, ECE 271', or None when nothing to show."""
    codes: dict[str, None] = {}
    for group in verdict["missing_groups"]:
        for code in group:
            codes[code] = None
    for mention in verdict["later_mentions"]:
        codes[mention["code"]] = None
    if not codes:
        return None
    return TOOLTIP_PREFIX + ", ".join(codes)


def apply_warnings(
    items: list[dict],
    course_to_index: dict[str, int],
    term_index_to_label: dict[int, str],
    history: set[str],
    catalog,
    annotator,
    context,
) -> dict:
    """
    Evaluates every scheduled course and sets or clears its badge.
    Uncached courses have no groups and are always compliant.
    Badges on cards that are no longer scheduled are dropped.

    Returns {card: verdict}.
    """
    verdicts = {}
    for item in items:
        verdict = evaluate_course(
            item,
            catalog.get(item["course_code"]),
            course_to_index,
            term_index_to_label,
            history,
        )
        verdicts[item["card"]] = verdict

        # The feature may have been switched off while this pass was running.
        if not context.enabled:
            continue
        tooltip = None if is_compliant(verdict) else badge_tooltip(verdict)
        if tooltip is None:
            annotator.clear_badge(item["card"])
        else:
            annotator.set_badge(item["card"], tooltip)

    if context.enabled:
        annotator.retain(verdicts)
    return verdicts
