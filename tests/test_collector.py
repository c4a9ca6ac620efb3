from collector import collect_scheduled
from fakes import layout
from page_model import JsonPlannerPage, parse_layout


class TestParseLayout:
    def test_non_dict(self):
        assert parse_layout(None) == []
        assert parse_layout([1, 2]) == []

    def test_columns_not_list(self):
        assert parse_layout({"columns": "nope"}) == []

    def test_malformed_column_keeps_position(self):
        columns = parse_layout({"columns": ["garbage", {"texts": ["Fall 2025"], "courses": []}]})
        assert len(columns) == 2
        assert columns[0].texts == []
        assert columns[1].texts == ["Fall 2025"]

    def test_heading_is_first_text(self):
        columns = parse_layout({"columns": [{"heading": "Fall 2025", "texts": ["15 credits"]}]})
        assert columns[0].texts == ["Fall 2025", "15 credits"]

    def test_course_without_card(self):
        columns = parse_layout({"columns": [{"texts": [], "courses": ["CS 261", {"text": "CS 271"}, 42]}]})
        elements = columns[0].course_elements
        assert [e.text for e in elements] == ["CS 261", "CS 271"]
        assert all(e.card is None for e in elements)


class TestCollectScheduled:
    def test_basic_layout(self):
        page = JsonPlannerPage(layout(
            ("Fall 2025", ["CS 261", "MTH 251"]),
            ("Winter 2026", ["CS 362"]),
        ))
        items, course_to_index, term_index_to_label = collect_scheduled(page)

        assert [i["course_code"] for i in items] == ["CS 261", "MTH 251", "CS 362"]
        assert items[0] == {
            "course_code": "CS 261",
            "term_index": 0,
            "term_code": "202601",
            "card": "card-CS261",
        }
        assert items[2]["term_code"] == "202602"
        assert course_to_index == {"CS 261": 0, "MTH 251": 0, "CS 362": 1}
        assert term_index_to_label == {0: "Fall 2025", 1: "Winter 2026"}

    def test_year_first_heading(self):
        page = JsonPlannerPage(layout(("2026 Spring", ["CS 290"])))
        items, _, labels = collect_scheduled(page)
        assert items[0]["term_code"] == "202603"
        assert labels == {0: "Spring 2026"}

    def test_unlabeled_column_skipped_but_keeps_index(self):
        page = JsonPlannerPage(layout(
            ("Transfer credit", ["WR 121"]),
            ("Fall 2025", ["CS 261"]),
        ))
        items, course_to_index, labels = collect_scheduled(page)
        assert [i["course_code"] for i in items] == ["CS 261"]
        assert course_to_index == {"CS 261": 1}
        assert labels == {1: "Fall 2025"}

    def test_code_is_normalized(self):
        page = JsonPlannerPage(layout(("Fall 2025", ["CS261H"])))
        items, course_to_index, _ = collect_scheduled(page)
        assert items[0]["course_code"] == "CS 261H"
        assert "CS 261H" in course_to_index

    def test_non_course_text_ignored(self):
        page = JsonPlannerPage(layout(("Fall 2025", ["Elective", "cs 261", "CS 261"])))
        items, _, _ = collect_scheduled(page)
        assert [i["course_code"] for i in items] == ["CS 261"]

    def test_missing_card_skipped(self):
        page = JsonPlannerPage({"columns": [{
            "texts": ["Fall 2025"],
            "courses": [{"text": "CS 261"}, {"text": "CS 271", "card": "c2"}],
        }]})
        items, course_to_index, _ = collect_scheduled(page)
        assert [i["course_code"] for i in items] == ["CS 271"]
        assert "CS 261" not in course_to_index

    def test_last_column_wins_for_repeated_course(self):
        page = JsonPlannerPage(layout(
            ("Fall 2025", ["CS 261"]),
            ("Winter 2026", ["CS 261"]),
        ))
        items, course_to_index, _ = collect_scheduled(page)
        assert len(items) == 2
        assert course_to_index["CS 261"] == 1

    def test_empty_page(self):
        assert collect_scheduled(JsonPlannerPage()) == ([], {}, {})

    def test_update_replaces_layout(self):
        page = JsonPlannerPage(layout(("Fall 2025", ["CS 261"])))
        page.update(layout(("Fall 2025", ["CS 271"])))
        items, _, _ = collect_scheduled(page)
        assert [i["course_code"] for i in items] == ["CS 271"]
