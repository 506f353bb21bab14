"""Tests for annotation merging and directive parsing."""

import pytest

from flexdisco.discovery.annotations import (
    build_directive,
    merge_annotations,
    parse_annotation_value,
    parse_directives,
)
from flexdisco.models.container import ContainerInspection
from flexdisco.models.directive import IPMode, TargetType


class TestMergeAnnotations:
    """Test label and environment merging."""

    def test_labels_only(self):
        """Test merging without an inspection."""
        assert merge_annotations({"a": "1"}) == {"a": "1"}

    def test_env_overrides_labels(self):
        """Test env entries are added after labels and win on collision."""
        inspection = ContainerInspection(
            id="abc",
            env=["a=2", "PATH=/usr/bin", "flexDiscoveryRedis=t=redis,c=redis"],
        )
        merged = merge_annotations({"a": "1", "b": "x"}, inspection)

        assert merged["a"] == "2"
        assert merged["b"] == "x"
        assert merged["PATH"] == "/usr/bin"
        # split on the first '=' only
        assert merged["flexDiscoveryRedis"] == "t=redis,c=redis"

    def test_malformed_env_skipped(self):
        """Test env entries without '=' are ignored."""
        inspection = ContainerInspection(id="abc", env=["NOVALUE", "EMPTY="])
        merged = merge_annotations({}, inspection)

        assert "NOVALUE" not in merged
        assert merged["EMPTY"] == ""


class TestParseAnnotationValue:
    """Test the two value encodings."""

    def test_pair_list(self):
        """Test comma separated key=value pairs."""
        assert parse_annotation_value("t=redis,tt=img,tm=contains") == {
            "t": "redis",
            "tt": "img",
            "tm": "contains",
        }

    @pytest.mark.parametrize("pairs,dotted", [
        ("t=redis,tt=img,tm=contains", "t_redis.tt_img.tm_contains"),
        ("t=cache,c=memcached,tt=cname", "t_cache.c_memcached.tt_cname"),
        ("t=nginx,ip=public,p=8080", "t_nginx.ip_public.p_8080"),
    ])
    def test_encodings_are_equivalent(self, pairs, dotted):
        """Test dotted values decode to the same fields as pair lists."""
        assert parse_annotation_value(pairs) == parse_annotation_value(dotted)

    def test_malformed_segments_skipped(self):
        """Test segments without exactly one separator are dropped."""
        assert parse_annotation_value("t=redis,broken,x=a=b") == {"t": "redis"}
        assert parse_annotation_value("t_redis.broken.x_a_b") == {"t": "redis"}

    def test_pair_list_preferred(self):
        """Test '=' selects the pair list encoding even with dots present."""
        assert parse_annotation_value("t=redis.io,tt=img") == {"t": "redis.io", "tt": "img"}

    def test_no_encoding(self):
        """Test values with neither separator yield nothing."""
        assert parse_annotation_value("redis") == {}


class TestBuildDirective:
    """Test typed directive construction."""

    def test_defaults(self):
        """Test defaults applied at parse time."""
        directive = build_directive("flexDiscoveryRedis", {"t": "redis"}, source="cid")

        assert directive.target == "redis"
        assert directive.config_name == "redis"
        assert directive.reverse is False
        assert directive.target_type == TargetType.IMAGE
        assert directive.target_mode == "contains"
        assert directive.ip_mode is None
        assert directive.port is None
        assert directive.claim_key == "cid/flexDiscoveryRedis"

    def test_all_fields(self):
        """Test every recognised field is carried."""
        directive = build_directive("k", {
            "t": "cache",
            "c": "memcached",
            "r": "true",
            "tt": "cname",
            "tm": "prefix",
            "ip": "public",
            "p": "11211",
        })

        assert directive.config_name == "memcached"
        assert directive.reverse is True
        assert directive.target_type == TargetType.CONTAINER_NAME
        assert directive.target_mode == "prefix"
        assert directive.ip_mode == IPMode.PUBLIC
        assert directive.port == "11211"

    def test_missing_target(self):
        """Test directives without a target are discarded."""
        assert build_directive("k", {"c": "redis"}) is None
        assert build_directive("k", {}) is None

    def test_unknown_ip_mode_ignored(self):
        """Test unrecognised ip modes fall back to the default."""
        directive = build_directive("k", {"t": "redis", "ip": "bogus"})
        assert directive.ip_mode is None

    def test_unknown_target_type(self):
        """Test unknown target types discard the directive."""
        assert build_directive("k", {"t": "redis", "tt": "other"}) is None


class TestParseDirectives:
    """Test directive extraction from annotation maps."""

    def test_marker_filter_and_order(self):
        """Test only marker keys are parsed, in key order."""
        annotations = {
            "flexDiscoveryZ": "t=zookeeper",
            "com.example.flexDiscoveryA": "t_apache",
            "unrelated": "t=redis",
            "flexDiscoveryEmpty": "nothing",
        }
        directives = parse_directives(annotations, source="cid")

        assert [d.target for d in directives] == ["apache", "zookeeper"]
        assert all(d.source == "cid" for d in directives)

    def test_custom_marker(self):
        """Test a configured marker substring."""
        directives = parse_directives({"probeMe": "t=redis"}, marker="probe")
        assert [d.target for d in directives] == ["redis"]
