"""Tests for the import transaction (parse, duplicate check, validate, commit)."""

import pytest

from builders import question_row, question_rows, survey_row, write_text_file
from surveyport.config import SurveyportConfig
from surveyport.importer import ImportService, ParsedImport, parse_import_file
from surveyport.issues import ImportRejected


def _seed(service, make_workbook, survey_id="S1", count=2):
    path = make_workbook([survey_row(survey_id)], question_rows(survey_id, count))
    return service.import_file(path)


class TestParseImportFile:
    def test_workbook(self, make_workbook):
        path = make_workbook([survey_row("S1")], question_rows("S1", 3))
        parsed = parse_import_file(path)
        assert [s["surveyId"] for s in parsed.surveys] == ["S1"]
        assert [q["questionId"] for q in parsed.questions] == ["Q1", "Q2", "Q3"]

    def test_workbook_missing_question_master(self, make_workbook):
        path = make_workbook([survey_row("S1")], None)
        with pytest.raises(ImportRejected) as exc_info:
            parse_import_file(path)
        assert exc_info.value.code == "IMPORT002"
        assert exc_info.value.issue.details == {
            "hasSurveyMaster": True,
            "hasQuestionMaster": False,
        }

    def test_workbook_with_empty_survey_master(self, make_workbook):
        path = make_workbook([survey_row("")], question_rows("S1", 1))
        with pytest.raises(ImportRejected) as exc_info:
            parse_import_file(path)
        assert exc_info.value.code == "IMPORT002"

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "batch.json"
        path.write_text("{}", encoding="utf-8")
        with pytest.raises(ImportRejected) as exc_info:
            parse_import_file(path)
        assert exc_info.value.code == "IMPORT001"

    def test_extension_is_case_insensitive(self, make_workbook):
        path = make_workbook([survey_row("S1")], question_rows("S1", 1), name="BATCH.XLSX")
        parsed = parse_import_file(path)
        assert len(parsed.surveys) == 1

    def test_original_filename_decides_format(self, tmp_path):
        path = write_text_file(tmp_path / "staged.csv", [survey_row("S1")])
        with pytest.raises(ImportRejected) as exc_info:
            parse_import_file(path, filename="surveys.json")
        assert exc_info.value.code == "IMPORT001"

    def test_corrupt_workbook(self, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"garbage")
        with pytest.raises(ImportRejected) as exc_info:
            parse_import_file(path)
        assert exc_info.value.code == "IMPORT001"
        assert "Failed to read Excel" in exc_info.value.issue.message

    def test_question_csv(self, tmp_path):
        path = write_text_file(tmp_path / "q.csv", question_rows("S1", 2))
        parsed = parse_import_file(path)
        assert parsed.surveys == []
        assert len(parsed.questions) == 2

    def test_survey_csv(self, tmp_path):
        path = write_text_file(tmp_path / "s.csv", [survey_row("S1"), survey_row("S2")])
        parsed = parse_import_file(path)
        assert [s["surveyId"] for s in parsed.surveys] == ["S1", "S2"]
        assert parsed.questions == []

    def test_declared_sheet_type(self, tmp_path):
        path = write_text_file(tmp_path / "s.tsv", [survey_row("S1")], delimiter="\t")
        parsed = parse_import_file(path, sheet_type="survey")
        assert len(parsed.surveys) == 1

    def test_undetectable_csv(self, tmp_path):
        path = write_text_file(tmp_path / "x.csv", [{"Name": "a", "Value": "b"}])
        with pytest.raises(ImportRejected) as exc_info:
            parse_import_file(path)
        assert exc_info.value.code == "IMPORT003"


class TestImportTransaction:
    def test_successful_import(self, service, store, make_workbook):
        result = _seed(service, make_workbook, "S1", 3)

        assert result.surveys_imported == 1
        assert result.questions_imported == 3
        assert result.overwrite is False
        data = store.read()
        assert [s["surveyId"] for s in data["surveys"]] == ["S1"]
        assert len(data["questions"]) == 3

    def test_result_payload(self, service, make_workbook):
        payload = _seed(service, make_workbook).to_dict()
        assert payload["message"] == "Import successful"
        assert payload["surveysImported"] == 1
        assert payload["questionsImported"] == 2
        assert payload["surveys"][0]["surveyId"] == "S1"

    def test_duplicate_rejected_without_overwrite(self, service, store, make_workbook):
        _seed(service, make_workbook, "S1")
        before = store.path.read_bytes()

        path = make_workbook([survey_row("S1"), survey_row("S2")], question_rows("S2", 1))
        with pytest.raises(ImportRejected) as exc_info:
            service.import_file(path)

        rejected = exc_info.value
        assert rejected.code == "IMPORT101"
        body = rejected.to_dict()
        assert body["validationErrors"] == [
            {
                "type": "survey",
                "index": 1,
                "surveyId": "S1",
                "errors": ["Survey ID already exists in the system"],
            }
        ]
        assert body["surveysCount"] == 2
        # Nothing from the batch was committed, not even S2
        assert store.path.read_bytes() == before

    def test_overwrite_replaces_questions_instead_of_merging(self, service, store, make_workbook):
        _seed(service, make_workbook, "S1", 5)
        _seed(service, make_workbook, "S2", 1)

        path = make_workbook([survey_row("S1", **{"Survey Name": "Renamed"})], question_rows("S1", 2))
        result = service.import_file(path, overwrite=True)

        assert result.overwrite is True
        assert [q["questionId"] for q in store.get_questions("S1")] == ["Q1", "Q2"]
        assert store.get_survey("S1")["surveyName"] == "Renamed"
        # Other surveys untouched
        assert len(store.get_questions("S2")) == 1
        assert [s["surveyId"] for s in store.read()["surveys"]].count("S1") == 1

    def test_overwrite_is_idempotent(self, service, store, make_workbook):
        rows = ([survey_row("S1")], question_rows("S1", 3))
        service.import_file(make_workbook(*rows), overwrite=True)
        first = store.read()
        service.import_file(make_workbook(*rows), overwrite=True)
        assert store.read() == first

    def test_rejected_duplicate_then_overwrite_succeeds(self, service, store, make_workbook):
        _seed(service, make_workbook, "S1", 2)
        rows = ([survey_row("S1")], question_rows("S1", 4))

        with pytest.raises(ImportRejected):
            service.import_file(make_workbook(*rows))
        service.import_file(make_workbook(*rows), overwrite=True)

        assert len(store.get_questions("S1")) == 4

    def test_validation_failure_commits_nothing(self, service, store, make_workbook):
        _seed(service, make_workbook, "S1")
        before = store.path.read_bytes()

        questions = question_rows("S2", 3)
        questions[2]["Question Type"] = "Essay"
        path = make_workbook([survey_row("S2")], questions)

        with pytest.raises(ImportRejected) as exc_info:
            service.import_file(path)

        rejected = exc_info.value
        assert rejected.code == "IMPORT201"
        assert [e.key for e in rejected.record_errors] == ["Q3"]
        assert rejected.record_errors[0].index == 3
        assert rejected.issue.details["questions"] == 1
        assert store.path.read_bytes() == before

    def test_failed_overwrite_keeps_existing_records(self, service, store, make_workbook):
        _seed(service, make_workbook, "S1", 5)
        before = store.path.read_bytes()

        path = make_workbook([survey_row("S1", **{"Launch Date": "2024-04-01"})], question_rows("S1", 1))
        with pytest.raises(ImportRejected):
            service.import_file(path, overwrite=True)

        assert store.path.read_bytes() == before
        assert len(store.get_questions("S1")) == 5

    def test_survey_repeated_within_batch_is_rejected(self, service, store, make_workbook):
        path = make_workbook([survey_row("S1"), survey_row("S1")], question_rows("S1", 1))
        with pytest.raises(ImportRejected) as exc_info:
            service.import_file(path)
        errors = exc_info.value.record_errors
        assert errors[0].index == 2
        assert errors[0].errors == ["Survey ID appears more than once in this import"]
        assert store.read()["surveys"] == []

    def test_question_only_csv_appends(self, service, store, make_workbook, tmp_path):
        _seed(service, make_workbook, "S1", 1)
        path = write_text_file(
            tmp_path / "more.csv",
            [question_row("S1", "Q7", **{"Question Type": "Text Response"})],
        )
        result = service.import_file(path)
        assert result.surveys_imported == 0
        assert [q["questionId"] for q in store.get_questions("S1")] == ["Q1", "Q7"]

    def test_source_question_check_follows_config(self, store, make_workbook):
        questions = question_rows("S1", 1) + [
            question_row(
                "S1", "Q1.1", **{"Question Type": "Text Response", "Source Question": "Q5"}
            )
        ]
        lenient = ImportService(store)
        strict = ImportService(store, SurveyportConfig(verify_source_questions=True))

        with pytest.raises(ImportRejected) as exc_info:
            strict.import_file(make_workbook([survey_row("S1")], questions))
        assert exc_info.value.record_errors[0].key == "Q1.1"

        lenient.import_file(make_workbook([survey_row("S1")], questions))
        assert len(store.get_questions("S1")) == 2

    def test_question_only_csv_twice_appends_again(self, service, store, make_workbook, tmp_path):
        """Only survey ids are duplicate-checked; repeated question rows are appended."""
        _seed(service, make_workbook, "S1", 1)
        rows = [question_row("S1", "Q7", **{"Question Type": "Text Response"})]
        service.import_file(write_text_file(tmp_path / "first.csv", rows))
        service.import_file(write_text_file(tmp_path / "second.csv", rows))
        assert [q["questionId"] for q in store.get_questions("S1")] == ["Q1", "Q7", "Q7"]


class TestNumericIdentifiers:
    """Ids typed as numbers in a workbook are stored and compared as text."""

    def test_numeric_cells_are_stored_as_text(self, service, store, make_workbook):
        path = make_workbook([survey_row(101)], question_rows(101, 2))
        service.import_file(path)

        survey = store.get_survey("101")
        assert survey is not None
        assert survey["surveyId"] == "101"
        assert {q["surveyId"] for q in store.get_questions("101")} == {"101"}

    def test_numeric_then_text_id_is_a_duplicate(self, service, store, make_workbook, tmp_path):
        service.import_file(make_workbook([survey_row(101)], question_rows(101, 1)))
        before = store.path.read_bytes()

        path = write_text_file(tmp_path / "surveys.csv", [survey_row("101")])
        with pytest.raises(ImportRejected) as exc_info:
            service.import_file(path)

        assert exc_info.value.code == "IMPORT101"
        assert store.path.read_bytes() == before
        assert [s["surveyId"] for s in store.read()["surveys"]] == ["101"]

    def test_overwrite_with_mixed_cell_types_replaces(self, service, store, make_workbook):
        service.import_file(make_workbook([survey_row("101")], question_rows(101, 5)))
        assert len(store.get_questions("101")) == 5

        service.import_file(
            make_workbook([survey_row(101)], question_rows("101", 2)), overwrite=True
        )

        assert [q["questionId"] for q in store.get_questions("101")] == ["Q1", "Q2"]
        assert len(store.read()["surveys"]) == 1

    def test_numeric_question_ids_consolidate_with_text_ids(self, service, store, make_workbook):
        questions = [
            question_row(101, 5, "English", **{"Question Type": "Text Response"}),
            question_row("101", "5", "Hindi", **{"Question Type": "Text Response"}),
        ]
        service.import_file(make_workbook([survey_row(101)], questions))

        stored = store.get_questions("101")
        assert len(stored) == 1
        assert stored[0]["questionId"] == "5"
        assert list(stored[0]["translations"]) == ["English", "Hindi"]


class TestUploadCleanup:
    def test_upload_deleted_after_success(self, service, make_workbook):
        path = make_workbook([survey_row("S1")], question_rows("S1", 1))
        service.import_file(path)
        assert not path.exists()

    def test_upload_deleted_after_rejection(self, service, make_workbook):
        path = make_workbook([survey_row("bad id")], question_rows("S1", 1))
        with pytest.raises(ImportRejected):
            service.import_file(path)
        assert not path.exists()

    def test_upload_deleted_after_parse_failure(self, service, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello", encoding="utf-8")
        with pytest.raises(ImportRejected):
            service.import_file(path)
        assert not path.exists()


def test_commit_accepts_parsed_records_directly(service, store):
    parsed = ParsedImport(
        surveys=[
            {
                "surveyId": "S5",
                "surveyName": "Direct",
                "surveyDescription": "Built in code",
            }
        ],
        questions=[],
    )
    service.commit(parsed)
    assert store.get_survey("S5")["surveyName"] == "Direct"
