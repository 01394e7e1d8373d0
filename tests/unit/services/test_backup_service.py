"""
Unit tests for BackupService.
"""
import json

import pytest

from blogmigrate.models import Blog
from blogmigrate.schemas.dto import MigrationReport
from blogmigrate.services.backup_service import (
    COUNT_MISMATCH_WARNING,
    BackupCorruptionError,
    BackupService,
    BackupStructureError,
    find_latest_backup,
)
from tests.conftest import at


def _write(path, document):
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def _seed(store, categories: int, blogs: int):
    for index in range(categories):
        store.categories.add(name=f"Category {index}", created_at=at(index))
    for index in range(blogs):
        store.blogs.add(title=f"Post {index}", subtitle="sub", created_at=at(index))


class TestCreateBackup:
    @pytest.mark.parametrize("categories,blogs", [(0, 0), (1, 0), (3, 5)])
    def test_counts_match_store_contents(self, memory_source, tmp_path, categories, blogs):
        _seed(memory_source, categories, blogs)

        result = BackupService(memory_source, tmp_path).create_backup()

        assert result.data.counts.categories == categories
        assert result.data.counts.blogs == blogs
        document = json.loads(result.file.read_text(encoding="utf-8"))
        assert len(document["categories"]) == categories
        assert len(document["blogs"]) == blogs
        assert document["counts"] == {"categories": categories, "blogs": blogs}
        assert document["timestamp"].endswith("Z")

    def test_creates_missing_directory(self, memory_source, tmp_path):
        backup_dir = tmp_path / "nested" / "backups"

        result = BackupService(memory_source, backup_dir).create_backup()

        assert result.file.parent == backup_dir
        assert result.file.name.startswith("source-backup-")
        assert ":" not in result.file.name

    def test_written_backup_validates_without_warnings(self, memory_source, tmp_path):
        _seed(memory_source, 2, 2)
        report = MigrationReport()

        result = BackupService(memory_source, tmp_path).create_backup()

        assert BackupService.validate_backup(result.file, report) is True
        assert report.warnings == []

    def test_records_use_camel_case_keys(self, memory_source, tmp_path):
        memory_source.blogs.add(title="T", subtitle="S", category_id="cat-9", is_archive=True)

        result = BackupService(memory_source, tmp_path).create_backup()

        blog = json.loads(result.file.read_text(encoding="utf-8"))["blogs"][0]
        assert blog["categoryId"] == "cat-9"
        assert blog["isArchive"] is True


    def test_rows_failing_record_validation_are_kept(self, sql_source, tmp_path):
        sql_source.blogs.session.add(Blog(title="Bad", subtitle="s", multi_views=-1))
        sql_source.blogs.session.commit()

        result = BackupService(sql_source, tmp_path).create_backup()

        assert result.data.counts.blogs == 1
        blog = json.loads(result.file.read_text(encoding="utf-8"))["blogs"][0]
        assert blog["multiViews"] == -1
        assert blog["createdAt"].endswith("Z")


class TestValidateBackup:
    def test_missing_blogs_is_structure_error(self, tmp_path):
        path = _write(tmp_path / "b.json", {"timestamp": "2024-01-01T00:00:00.000Z", "categories": []})

        with pytest.raises(BackupStructureError, match="Invalid backup file structure"):
            BackupService.validate_backup(path, MigrationReport())

    def test_empty_timestamp_is_structure_error(self, tmp_path):
        path = _write(tmp_path / "b.json", {"timestamp": "", "categories": [], "blogs": []})

        with pytest.raises(BackupStructureError):
            BackupService.validate_backup(path, MigrationReport())

    @pytest.mark.parametrize(
        "field,value",
        [("categories", False), ("categories", 0), ("blogs", False), ("timestamp", 0)],
    )
    def test_falsy_required_field_is_structure_error(self, tmp_path, field, value):
        document = {"timestamp": "2024-01-01T00:00:00.000Z", "categories": [], "blogs": []}
        document[field] = value
        path = _write(tmp_path / "b.json", document)

        with pytest.raises(BackupStructureError):
            BackupService.validate_backup(path, MigrationReport())

    def test_non_list_categories_is_corruption(self, tmp_path):
        path = _write(
            tmp_path / "b.json",
            {"timestamp": "2024-01-01T00:00:00.000Z", "categories": "not-an-array", "blogs": []},
        )

        with pytest.raises(BackupCorruptionError, match="Backup data is corrupted"):
            BackupService.validate_backup(path, MigrationReport())

    def test_invalid_json_is_corruption(self, tmp_path):
        path = tmp_path / "b.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(BackupCorruptionError):
            BackupService.validate_backup(path, MigrationReport())

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            BackupService.validate_backup(tmp_path / "missing.json", MigrationReport())

    def test_count_mismatch_warns_but_passes(self, tmp_path):
        report = MigrationReport()
        path = _write(
            tmp_path / "b.json",
            {
                "timestamp": "2024-01-01T00:00:00.000Z",
                "categories": [{"id": "c1", "name": "A"}],
                "blogs": [],
                "counts": {"categories": 2, "blogs": 0},
            },
        )

        assert BackupService.validate_backup(path, report) is True
        assert report.warnings == [COUNT_MISMATCH_WARNING]

    def test_missing_counts_compare_as_zero(self, tmp_path):
        report = MigrationReport()
        path = _write(
            tmp_path / "b.json",
            {"timestamp": "2024-01-01T00:00:00.000Z", "categories": [], "blogs": []},
        )

        assert BackupService.validate_backup(path, report) is True
        assert report.warnings == []


class TestLoadBackup:
    def test_load_returns_typed_records(self, memory_source, tmp_path):
        _seed(memory_source, 1, 2)
        result = BackupService(memory_source, tmp_path).create_backup()

        artifact = BackupService.load_backup(result.file)

        assert artifact.store == "source"
        assert [c.name for c in artifact.categories] == ["Category 0"]
        assert [b.title for b in artifact.blogs] == ["Post 0", "Post 1"]

    def test_malformed_record_is_corruption(self, tmp_path):
        path = _write(
            tmp_path / "b.json",
            {"timestamp": "2024-01-01T00:00:00.000Z", "categories": [{"id": "c1"}], "blogs": []},
        )

        with pytest.raises(BackupCorruptionError):
            BackupService.load_backup(path)


class TestFindLatestBackup:
    def test_picks_newest_for_label(self, tmp_path):
        for name in (
            "target-backup-2024-01-01T00-00-00-000Z.json",
            "target-backup-2024-02-01T00-00-00-000Z.json",
            "source-backup-2024-03-01T00-00-00-000Z.json",
        ):
            (tmp_path / name).write_text("{}", encoding="utf-8")

        assert find_latest_backup(tmp_path, "target").name == "target-backup-2024-02-01T00-00-00-000Z.json"
        assert find_latest_backup(tmp_path).name == "source-backup-2024-03-01T00-00-00-000Z.json"

    def test_empty_directory(self, tmp_path):
        assert find_latest_backup(tmp_path / "none") is None
