"""
Tests for ResultSetController.

Covers:
- search replaces canonical + displayed in source order
- sort_by toggling, reversal, stability, mixed value types
- out-of-order responses (last request wins)
- failures leave the previous result set untouched and clear `loading`
"""

import asyncio
import unittest

from fakes import FakeApi, make_row

from estagios.controller import ResultSetController, sort_key
from estagios.errors import ApiError, NetworkError
from estagios.model import ASC, DESC, FilterCriteria


def ids(records) -> list[str]:
    return [r.record_id for r in records]


class TestSortKey(unittest.TestCase):
    def test_blank_values_sort_as_empty_string(self) -> None:
        self.assertEqual(sort_key(None), sort_key(""))
        self.assertEqual(sort_key("  "), sort_key(""))
        self.assertLess(sort_key(None), sort_key("a"))

    def test_text_is_case_folded(self) -> None:
        self.assertEqual(sort_key("ana"), sort_key("ANA"))

    def test_numbers_before_text(self) -> None:
        self.assertLess(sort_key(7.5), sort_key(8))
        self.assertLess(sort_key(10), sort_key("10"))


class TestSearch(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.api = FakeApi(
            [
                make_row(1, "Carla", status="Concluído"),
                make_row(2, "Ana"),
                make_row(3, "Bruno"),
            ]
        )
        self.controller = ResultSetController(self.api)

    async def test_search_keeps_source_order(self) -> None:
        records = await self.controller.search(FilterCriteria())
        self.assertEqual(ids(records), ["1", "2", "3"])
        self.assertEqual(ids(self.controller.displayed), ["1", "2", "3"])
        self.assertEqual(ids(self.controller.canonical), ["1", "2", "3"])
        self.assertEqual(self.controller.stats.total, 3)
        self.assertFalse(self.controller.loading)

    async def test_filters_never_increase_result_count(self) -> None:
        everything = await self.controller.search(FilterCriteria())
        filtered = await self.controller.search(FilterCriteria(status="ALUNO"))
        self.assertLessEqual(len(filtered), len(everything))
        self.assertEqual(ids(filtered), ["2", "3"])

    async def test_empty_result_is_not_an_error(self) -> None:
        records = await self.controller.search(FilterCriteria(name="Zelda"))
        self.assertEqual(records, [])
        self.assertTrue(self.controller.view().is_empty)

    async def test_failure_leaves_previous_state(self) -> None:
        await self.controller.search(FilterCriteria())
        self.controller.sort_by("nome-completo")
        before = ids(self.controller.displayed)

        self.api.search_error = ApiError("Erro 500", 500)
        with self.assertRaises(ApiError):
            await self.controller.search(FilterCriteria(name="Ana"))

        self.assertEqual(ids(self.controller.displayed), before)
        self.assertFalse(self.controller.loading)

    async def test_network_failure_clears_loading(self) -> None:
        self.api.search_error = NetworkError("down")
        with self.assertRaises(NetworkError):
            await self.controller.search(FilterCriteria())
        self.assertFalse(self.controller.loading)
        self.assertEqual(self.controller.displayed, [])

    async def test_refresh_reuses_last_criteria(self) -> None:
        criteria = FilterCriteria(status="ALUNO")
        await self.controller.search(criteria)
        await self.controller.refresh()
        self.assertIs(self.api.search_calls[-1], criteria)
        self.assertEqual(len(self.api.search_calls), 2)

    async def test_sort_state_survives_search_and_refresh(self) -> None:
        await self.controller.search(FilterCriteria())
        self.controller.sort_by("nome-completo")

        await self.controller.refresh()
        self.assertEqual(self.controller.sort_state.column, "nome-completo")
        self.assertEqual(self.controller.sort_state.direction, ASC)
        # a new search shows rows in source order
        self.assertEqual(ids(self.controller.displayed), ["1", "2", "3"])

        await self.controller.search(FilterCriteria())
        self.assertEqual(self.controller.sort_state.column, "nome-completo")

        # choosing the same column again toggles
        self.assertEqual(ids(self.controller.sort_by("nome-completo")), ["1", "3", "2"])
        self.assertEqual(self.controller.sort_state.direction, DESC)

    async def test_start_loads_options_before_search(self) -> None:
        await self.controller.start()
        self.assertIsNotNone(self.controller.filter_options)
        self.assertIn("Concluído", self.controller.filter_options.status)
        self.assertEqual(len(self.api.search_calls), 1)

    async def test_find_by_id(self) -> None:
        await self.controller.search(FilterCriteria())
        self.assertEqual(self.controller.find(2).full_name, "Ana")
        self.assertIsNone(self.controller.find("99"))


class TestOutOfOrderResponses(unittest.IsolatedAsyncioTestCase):
    async def test_slow_superseded_response_is_discarded(self) -> None:
        api = FakeApi([make_row(1, "Ana"), make_row(2, "Bruno")])
        controller = ResultSetController(api)

        slow_gate = asyncio.Event()
        api.gates = [slow_gate, None]

        slow = asyncio.create_task(controller.search(FilterCriteria(name="Ana")))
        await asyncio.sleep(0)  # slow request is now in flight

        fast = await controller.search(FilterCriteria(name="Bruno"))
        self.assertEqual(ids(fast), ["2"])

        slow_gate.set()
        self.assertIsNone(await slow)

        self.assertEqual(ids(controller.displayed), ["2"])
        self.assertEqual(controller.last_criteria.name, "Bruno")
        self.assertFalse(controller.loading)

    async def test_slow_superseded_failure_is_discarded(self) -> None:
        api = FakeApi([make_row(1, "Ana"), make_row(2, "Bruno")])
        controller = ResultSetController(api)

        slow_gate = asyncio.Event()
        api.gates = [slow_gate, None]

        slow = asyncio.create_task(controller.search(FilterCriteria(name="Ana")))
        await asyncio.sleep(0)

        await controller.search(FilterCriteria(name="Bruno"))

        api.search_error = NetworkError("timeout")
        slow_gate.set()
        self.assertIsNone(await slow)

        self.assertEqual(ids(controller.displayed), ["2"])
        self.assertFalse(controller.loading)

    async def test_loading_stays_on_while_latest_is_pending(self) -> None:
        api = FakeApi([make_row(1, "Ana")])
        controller = ResultSetController(api)

        gate = asyncio.Event()
        api.gates = [None, gate]

        first = await controller.search(FilterCriteria())
        self.assertEqual(ids(first), ["1"])

        pending = asyncio.create_task(controller.search(FilterCriteria()))
        await asyncio.sleep(0)
        self.assertTrue(controller.loading)

        gate.set()
        await pending
        self.assertFalse(controller.loading)


class TestSortBy(unittest.IsolatedAsyncioTestCase):
    async def test_name_ascending_then_descending(self) -> None:
        api = FakeApi([])
        api.rows = [
            {"idRegistro": 1, "name": "Ana", "statusPreenchimento": "ALUNO"},
            {"idRegistro": 2, "name": "Bruno", "statusPreenchimento": "Concluído"},
        ]
        controller = ResultSetController(api)
        await controller.search(FilterCriteria())

        asc = controller.sort_by("name")
        self.assertEqual([r.get("name") for r in asc], ["Ana", "Bruno"])
        self.assertEqual(controller.sort_state.direction, ASC)

        desc = controller.sort_by("name")
        self.assertEqual([r.get("name") for r in desc], ["Bruno", "Ana"])
        self.assertEqual(controller.sort_state.direction, DESC)

    async def test_second_sort_is_exact_reverse(self) -> None:
        api = FakeApi([make_row(i, n) for i, n in enumerate(["delta", "Alfa", "charlie", "Bravo", "eco"], start=1)])
        controller = ResultSetController(api)
        await controller.search(FilterCriteria())

        first = ids(controller.sort_by("nome-completo"))
        second = ids(controller.sort_by("nome-completo"))
        self.assertEqual(first, ["2", "4", "3", "1", "5"])
        self.assertEqual(second, list(reversed(first)))

    async def test_ties_keep_canonical_order(self) -> None:
        api = FakeApi(
            [
                make_row(1, "A", status="ALUNO"),
                make_row(2, "B", status="Concluído"),
                make_row(3, "C", status="aluno"),
                make_row(4, "D", status="Concluído"),
                make_row(5, "E", status="ALUNO"),
            ]
        )
        controller = ResultSetController(api)
        await controller.search(FilterCriteria())

        self.assertEqual(ids(controller.sort_by("statusPreenchimento")), ["1", "3", "5", "2", "4"])
        self.assertEqual(ids(controller.sort_by("statusPreenchimento")), ["2", "4", "1", "3", "5"])

    async def test_sort_is_over_canonical_not_previous_display(self) -> None:
        api = FakeApi([make_row(1, "B", curso="X"), make_row(2, "A", curso="X"), make_row(3, "C", curso="X")])
        controller = ResultSetController(api)
        await controller.search(FilterCriteria())

        controller.sort_by("nome-completo")
        # all ties: canonical order, not the name order from the previous sort
        self.assertEqual(ids(controller.sort_by("curso")), ["1", "2", "3"])
        self.assertEqual(ids(controller.canonical), ["1", "2", "3"])

    async def test_missing_and_numeric_values(self) -> None:
        api = FakeApi(
            [
                make_row(1, "A", **{"Média": 8}),
                make_row(2, "B", **{"Média": None}),
                make_row(3, "C", **{"Média": 7.5}),
            ]
        )
        del api.rows[1]["Média"]
        controller = ResultSetController(api)
        await controller.search(FilterCriteria())

        self.assertEqual(ids(controller.sort_by("Média")), ["2", "3", "1"])

    async def test_sort_does_not_fetch(self) -> None:
        api = FakeApi([make_row(1, "A"), make_row(2, "B")])
        controller = ResultSetController(api)
        await controller.search(FilterCriteria())
        controller.sort_by("nome-completo")
        self.assertEqual(len(api.search_calls), 1)

    async def test_view_reflects_sort(self) -> None:
        api = FakeApi([make_row(1, "B"), make_row(2, "A")])
        controller = ResultSetController(api)
        await controller.search(FilterCriteria())
        controller.sort_by("nome-completo")

        view = controller.view()
        self.assertEqual(ids(view.rows), ["2", "1"])
        self.assertEqual(view.sort_state.column, "nome-completo")
        self.assertEqual(view.stats.total, 2)


if __name__ == "__main__":
    unittest.main()
