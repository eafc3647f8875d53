import unittest
from tracepprof.aggregate import Analysis, Record, aggregate, merge_aggregates
from tracepprof.trace_dto import Event, EventType, Frame

STACK = [Frame(0x10, "f", "a.go", 10), Frame(0x20, "g", "b.go", 20)]
OTHER_STACK = [Frame(0x30, "h", "c.go", 30)]


def _linked(type, ts, elapsed, stack_id=7, stack=STACK):
    end = Event(EventType.go_unblock, ts + elapsed)
    return Event(type, ts, stack_id=stack_id, stack=stack, link=end)


class TestAggregate(unittest.TestCase):
    def test_same_stack_is_summed(self):
        events = [
            _linked(EventType.go_block_net, 1000, 100),
            _linked(EventType.go_block_net, 2000, 150),
        ]
        records = aggregate(events, Analysis.io)

        self.assertEqual(list(records.keys()), [7])
        self.assertEqual(records[7].count, 2)
        self.assertEqual(records[7].time, 250)
        self.assertEqual(records[7].stack, STACK)

    def test_one_record_per_stack_id(self):
        events = [
            _linked(EventType.go_sys_call, 0, 5, stack_id=1),
            _linked(EventType.go_sys_call, 0, 6, stack_id=2, stack=OTHER_STACK),
            _linked(EventType.go_sys_call, 0, 7, stack_id=1),
        ]
        records = aggregate(events, Analysis.syscall)

        self.assertEqual(len(records), 2)
        self.assertEqual((records[1].count, records[1].time), (2, 12))
        self.assertEqual((records[2].count, records[2].time), (1, 6))

    def test_matching_table(self):
        expected = {
            Analysis.io: {EventType.go_block_net},
            Analysis.block: {
                EventType.go_block_send,
                EventType.go_block_recv,
                EventType.go_block_select,
                EventType.go_block_sync,
                EventType.go_block_cond,
            },
            Analysis.syscall: {EventType.go_sys_call},
            Analysis.sched: {EventType.go_unblock, EventType.go_create},
        }
        for analysis, types in expected.items():
            for type in EventType:
                events = [_linked(type, 0, 10)]
                records = aggregate(events, analysis)
                with self.subTest(analysis=analysis, type=type):
                    self.assertEqual(len(records), 1 if type in types else 0)

    def test_skips_unlinked_events(self):
        ev = Event(EventType.go_block_net, 0, stack_id=7, stack=STACK)
        self.assertEqual(aggregate([ev], Analysis.io), {})

    def test_skips_events_without_stack_id(self):
        events = [_linked(EventType.go_block_net, 0, 10, stack_id=0)]
        self.assertEqual(aggregate(events, Analysis.io), {})

    def test_skips_events_with_empty_stack(self):
        events = [_linked(EventType.go_block_net, 0, 10, stack=[])]
        self.assertEqual(aggregate(events, Analysis.io), {})

    def test_empty_input(self):
        for analysis in Analysis:
            self.assertEqual(aggregate([], analysis), {})

    def test_negative_duration_is_kept(self):
        events = [
            _linked(EventType.go_block_net, 1000, -40),
            _linked(EventType.go_block_net, 2000, 10),
        ]
        with self.assertLogs("tracepprof.aggregate", level="WARNING"):
            records = aggregate(events, Analysis.io)
        self.assertEqual(records[7].time, -30)

    def test_first_stack_is_kept(self):
        events = [
            _linked(EventType.go_block_net, 0, 1),
            _linked(EventType.go_block_net, 0, 1, stack=list(STACK)),
        ]
        records = aggregate(events, Analysis.io)
        self.assertIs(records[7].stack, events[0].stack)

    def test_source_errors_propagate(self):
        def _source():
            yield _linked(EventType.go_block_net, 0, 1)
            raise OSError("truncated trace")

        with self.assertRaises(OSError):
            aggregate(_source(), Analysis.io)

    def test_input_is_not_modified(self):
        events = [_linked(EventType.go_block_net, 0, 1)]
        before = [(ev.type, ev.ts, ev.stack_id, list(ev.stack)) for ev in events]
        aggregate(events, Analysis.io)
        after = [(ev.type, ev.ts, ev.stack_id, list(ev.stack)) for ev in events]
        self.assertEqual(before, after)


class TestMergeAggregates(unittest.TestCase):
    def test_partitions_merge_to_whole(self):
        events = [
            _linked(EventType.go_block_sync, 0, 3, stack_id=1),
            _linked(EventType.go_block_cond, 0, 4, stack_id=2, stack=OTHER_STACK),
            _linked(EventType.go_block_send, 0, 5, stack_id=1),
        ]
        whole = aggregate(events, Analysis.block)
        parts = merge_aggregates(
            aggregate(events[:1], Analysis.block),
            aggregate(events[1:], Analysis.block),
        )
        self.assertEqual(parts, whole)

    def test_inputs_are_not_mutated(self):
        a = {1: Record(STACK, 1, 10)}
        b = {1: Record(STACK, 2, 20)}
        merged = merge_aggregates(a, b)
        self.assertEqual((merged[1].count, merged[1].time), (3, 30))
        self.assertEqual((a[1].count, a[1].time), (1, 10))


class TestAnalysis(unittest.TestCase):
    def test_from_name(self):
        self.assertIs(Analysis.from_name("sched"), Analysis.sched)

    def test_unknown_name(self):
        with self.assertRaises(ValueError):
            Analysis.from_name("heap")


if __name__ == "__main__":
    unittest.main()
