"""
Tests for values generation - deep merge, dotted-key expansion, file output.
"""

import datetime
import itertools
import os

import pytest
import yaml

from kubeboot.errors import ValuesParseError, ValuesWriteError
from kubeboot.values import (
    ValueKind,
    expand_dotted,
    expand_overrides,
    generate_values_file,
    kind_of,
    load_defaults,
    merge,
)


class TestMerge:

    @pytest.mark.parametrize("dest,src,expected", [
        ({"a": 1}, {"b": 2}, {"a": 1, "b": 2}),
        ({"a": 1}, {"a": 2}, {"a": 2}),
        (
            {"a": {"b": 1, "c": 2}},
            {"a": {"b": 99, "d": 4}},
            {"a": {"b": 99, "c": 2, "d": 4}},
        ),
        ({"a": 1}, {"a": {"b": 2}}, {"a": {"b": 2}}),
        ({"a": {"b": 2}}, {"a": 1}, {"a": 1}),
        ({"a": [1, 2]}, {"a": [3]}, {"a": [3]}),
        ({"a": {"b": 1}}, {"a": ["x"]}, {"a": ["x"]}),
        ({"a": 1}, {}, {"a": 1}),
        ({}, {"a": 1}, {"a": 1}),
        ({}, {}, {}),
    ], ids=[
        "no-conflict",
        "source-overwrites-scalar",
        "deep-merge",
        "map-displaces-scalar",
        "scalar-displaces-map",
        "sequence-replaced-not-concatenated",
        "sequence-displaces-map",
        "empty-source",
        "empty-destination",
        "both-empty",
    ])
    def test_merge(self, dest, src, expected):
        assert merge(dest, src) == expected

    def test_merges_in_place(self):
        dest = {"a": {"b": 1}}

        result = merge(dest, {"a": {"c": 2}})

        assert result is dest
        assert dest == {"a": {"b": 1, "c": 2}}

    def test_source_is_not_modified(self):
        src = {"a": {"b": 1}}
        dest = {}

        merge(dest, src)
        merge(dest, {"a": {"c": 2}})

        assert src == {"a": {"b": 1}}

    def test_independent_of_key_order(self):
        dest = {"x": {"a": 1, "b": 2}, "y": 3}
        items = [("x", {"b": 20, "c": 30}), ("y", {"z": 1}), ("w", [1])]

        results = []
        for order in itertools.permutations(items):
            results.append(merge({k: dict(v) if isinstance(v, dict) else v for k, v in dest.items()}, dict(order)))

        assert all(r == results[0] for r in results)

    def test_dates_and_numbers_are_scalars(self):
        today = datetime.date(2024, 1, 2)

        assert kind_of(today) is ValueKind.SCALAR
        assert kind_of(1.5) is ValueKind.SCALAR
        assert kind_of(None) is ValueKind.SCALAR
        assert kind_of([1]) is ValueKind.SEQUENCE
        assert kind_of({}) is ValueKind.MAP
        assert merge({"when": {"a": 1}}, {"when": today}) == {"when": today}


class TestExpandDotted:

    def test_single_segment(self):
        assert expand_dotted("a", 1) == {"a": 1}

    def test_nested(self):
        assert expand_dotted("controller.image.tag", "v1") == {
            "controller": {"image": {"tag": "v1"}}
        }

    def test_map_leaf(self):
        assert expand_dotted("a.b", {"c": 1}) == {"a": {"b": {"c": 1}}}

    def test_overrides_share_prefixes(self):
        assert expand_overrides({"service.type": "ClusterIP", "service.port": 8080}) == {
            "service": {"type": "ClusterIP", "port": 8080}
        }

    def test_none_overrides(self):
        assert expand_overrides(None) == {}


class TestLoadDefaults:

    @pytest.mark.parametrize("text", ["", "   \n", None, "# only a comment\n"])
    def test_empty_input(self, text):
        assert load_defaults(text) == {}

    def test_malformed(self):
        with pytest.raises(ValuesParseError):
            load_defaults("invalid: yaml: content: [unclosed")

    def test_not_a_mapping(self):
        with pytest.raises(ValuesParseError, match="mapping"):
            load_defaults("- a\n- b\n")


def _read_yaml(path):
    with open(path) as f:
        return yaml.safe_load(f)


class TestGenerateValuesFile:

    def test_merges_overrides_onto_defaults(self, tmp_path):
        path = tmp_path / "values.yaml"
        defaults = """
controller:
  logLevel: "info" # This should be overwritten
  replicas: 1
image:
  repository: "nginx"
"""

        tree = generate_values_file(
            path,
            {"controller.logLevel": "debug", "image.tag": "latest"},
            defaults,
        )

        expected = {
            "controller": {"logLevel": "debug", "replicas": 1},
            "image": {"repository": "nginx", "tag": "latest"},
        }
        assert _read_yaml(path) == expected
        assert tree == expected

    def test_overrides_without_defaults(self, tmp_path):
        path = tmp_path / "values.yaml"

        generate_values_file(path, {"service.type": "ClusterIP", "service.port": 8080}, "")

        assert _read_yaml(path) == {"service": {"port": 8080, "type": "ClusterIP"}}

    def test_defaults_only(self, tmp_path):
        path = tmp_path / "values.yaml"

        generate_values_file(path, None, 'global:\n  clusterName: "test-cluster"\n')

        assert _read_yaml(path) == {"global": {"clusterName": "test-cluster"}}

    def test_none_overrides_exact_content(self, tmp_path):
        path = tmp_path / "values.yaml"

        generate_values_file(path, None, "defaultKey: defaultValue")

        assert path.read_text() == "defaultKey: defaultValue\n"

    def test_replaces_existing_file(self, tmp_path):
        path = tmp_path / "values.yaml"
        path.write_text("old: true\n")

        generate_values_file(path, {"new": 1}, "")

        assert _read_yaml(path) == {"new": 1}

    def test_malformed_defaults_writes_nothing(self, tmp_path):
        path = tmp_path / "values.yaml"

        with pytest.raises(ValuesParseError):
            generate_values_file(path, {"a": "b"}, "invalid: yaml: content: [unclosed")

        assert not path.exists()
        assert list(tmp_path.iterdir()) == []

    def test_malformed_defaults_keeps_existing_file(self, tmp_path):
        path = tmp_path / "values.yaml"
        path.write_text("keep: me\n")

        with pytest.raises(ValuesParseError):
            generate_values_file(path, None, "a: [")

        assert path.read_text() == "keep: me\n"

    def test_missing_directory(self, tmp_path):
        path = tmp_path / "does-not-exist" / "values.yaml"

        with pytest.raises(ValuesWriteError):
            generate_values_file(path, {"a": "b"}, "")

        assert not path.exists()

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="directory permissions are not enforced for root",
    )
    def test_read_only_directory(self, tmp_path):
        read_only = tmp_path / "read-only-dir"
        read_only.mkdir(mode=0o555)
        try:
            with pytest.raises(ValuesWriteError):
                generate_values_file(read_only / "values.yaml", {"a": "b"}, "")
            assert list(read_only.iterdir()) == []
        finally:
            read_only.chmod(0o755)
