"""
Emissions core unit tests for the entity tags and the validation of writes
"""

import datetime
import unittest as _unittest

import pydantic

from emissions_core import schemas
from emissions_core.state import validator

from . import utils


class ValidatorTests(utils.BaseTest):
    def test_token_determinism(self):
        report = self.get_sample_report()
        self.assertEqual(validator.compute_token(report), validator.compute_token(report))
        self.assertEqual(validator.compute_token(report), validator.compute_token(self.get_sample_report()))
        self.assertEqual(64, len(validator.compute_token(report)))

        # The order of the fields doesn't matter for plain mappings
        values = report.model_dump(mode="json")
        reversed_values = dict(reversed(list(values.items())))
        self.assertEqual(validator.compute_token(values), validator.compute_token(reversed_values))

    def test_token_sensitivity(self):
        report = self.get_sample_report()
        tag = validator.compute_token(report)
        variations = [
            {"title": "Informe Anual de Emisiones 2024"},
            {"description": ""},
            {"co2_total": 1500.6},
            {"co2_total": 0},
            {"status": "published"},
            {"created_at": datetime.date(2023, 10, 16)},
            {"updated_at": report.updated_at + datetime.timedelta(microseconds=1)},
            {"updated_by": "someone"},
            {"id": 2}
        ]
        tags = {tag}
        for changes in variations:
            other = self.get_sample_report(**changes)
            self.assertNotEqual(tag, validator.compute_token(other), changes)
            tags.add(validator.compute_token(other))
        self.assertEqual(len(variations) + 1, len(tags))

        # Equal content of different kinds of resources yields different tags
        self.assertNotEqual(
            validator.compute_token(report),
            validator.compute_token(report.model_dump(mode="json"))
        )

    def test_missing_token(self):
        for report in [self.get_sample_report(), self.get_sample_report(id=2, status="archived")]:
            for token in [None, "", [], [""], ("", "")]:
                decision = validator.admit_write(report, token)
                self.assertIsInstance(decision, validator.Rejected)
                self.assertEqual(validator.Reason.PRECONDITION_REQUIRED, decision.reason)
                self.assertEqual(validator.compute_token(report), decision.token)

    def test_stale_token(self):
        report = self.get_sample_report()
        t0 = validator.compute_token(report)
        updated = validator.apply_mutation(report, {"co2_total": 1650})
        t1 = validator.compute_token(updated)
        self.assertNotEqual(t0, t1)

        decision = validator.admit_write(updated, t0)
        self.assertIsInstance(decision, validator.Rejected)
        self.assertEqual(validator.Reason.PRECONDITION_FAILED, decision.reason)
        self.assertEqual(t1, decision.token)

        for token in ["foo", t0.upper(), [t0], ["foo", "bar"], f'"{t1}"', f"W/{t1}"]:
            decision = validator.admit_write(updated, token)
            self.assertEqual(validator.Reason.PRECONDITION_FAILED, decision.reason, token)

    def test_fresh_token(self):
        report = self.get_sample_report()
        tag = validator.compute_token(report)
        self.assertEqual(validator.Admitted(tag), validator.admit_write(report, tag))
        self.assertEqual(validator.Admitted(tag), validator.admit_write(report, [tag]))
        self.assertEqual(validator.Admitted(tag), validator.admit_write(report, ["foo", tag]))
        self.assertEqual(validator.Admitted(tag), validator.admit_write(report, iter(["", tag])))

    def test_partial_update(self):
        report = self.get_sample_report()
        updated = validator.apply_mutation(report, {"co2_total": 1650})
        self.assertEqual(1650, updated.co2_total)
        self.assertGreater(updated.updated_at, report.updated_at)
        for field in ["id", "title", "description", "status", "created_at", "updated_by"]:
            self.assertEqual(getattr(report, field), getattr(updated, field), field)

        # The original snapshot is left untouched
        self.assertEqual(1500.5, report.co2_total)
        self.assertEqual(self.get_sample_report(), report)

        updated = validator.apply_mutation(report, {"status": "published", "updated_by": "alice"})
        self.assertEqual(schemas.ReportStatus.PUBLISHED, updated.status)
        self.assertEqual("alice", updated.updated_by)
        self.assertEqual(report.co2_total, updated.co2_total)

    def test_empty_mutation_changes_tag(self):
        report = self.get_sample_report()
        updated = validator.apply_mutation(report, {})
        self.assertNotEqual(validator.compute_token(report), validator.compute_token(updated))
        self.assertEqual(report.model_dump(exclude={"updated_at"}), updated.model_dump(exclude={"updated_at"}))

    def test_strictly_increasing_timestamps(self):
        future = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(days=1)
        report = self.get_sample_report(updated_at=future)
        first = validator.apply_mutation(report, {})
        second = validator.apply_mutation(first, {})
        self.assertLess(report.updated_at, first.updated_at)
        self.assertLess(first.updated_at, second.updated_at)
        self.assertEqual(3, len({validator.compute_token(r) for r in [report, first, second]}))

        now = validator.next_timestamp()
        self.assertIsNotNone(now.tzinfo)
        self.assertGreater(validator.next_timestamp(now), now)

    def test_invalid_mutations(self):
        report = self.get_sample_report()
        for changes in [{"id": 3}, {"created_at": datetime.date(2020, 1, 1)}, {"updated_at": None}, {"foo": 1}]:
            with self.assertRaises(ValueError):
                validator.apply_mutation(report, changes)
        for changes in [{"co2_total": -1}, {"title": ""}, {"status": "deleted"}]:
            with self.assertRaises(pydantic.ValidationError):
                validator.apply_mutation(report, changes)
        self.assertEqual(self.get_sample_report(), report)

    def test_editable_fields(self):
        self.assertEqual(
            {"title", "description", "co2_total", "status", "updated_by"},
            set(validator.EDITABLE_FIELDS)
        )

    def test_patch_schema(self):
        self.assertEqual({"co2_total": 1650.0}, schemas.ReportPatch(co2_total=1650).changes())
        self.assertEqual({}, schemas.ReportPatch().changes())
        self.assertEqual({"updated_by": None}, schemas.ReportPatch(updated_by=None).changes())
        for values in [{"co2_total": None}, {"title": None}, {"id": 1}, {"updated_at": "2024-01-01T00:00:00Z"}]:
            with self.assertRaises(pydantic.ValidationError):
                schemas.ReportPatch(**values)


if __name__ == '__main__':
    _unittest.main()
