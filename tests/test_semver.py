"""
Unit tests for the semantic version value type.
"""

import unittest

from gitsemver.core.exceptions import ParseError
from gitsemver.versioning.semver import SemVer, SemVerExtended, parse_semver


class TestSemVerParse(unittest.TestCase):
    """Tests for parsing tag names."""

    def test_parse_plain_version(self):
        """Test parsing a bare version triple."""
        version = SemVer.parse("1.2.3")

        self.assertEqual(version.core, (1, 2, 3))
        self.assertEqual(version.leading_v, "")
        self.assertEqual(version.prefix, "")
        self.assertIsNone(version.ext)

    def test_parse_leading_v(self):
        """Test that a leading v is preserved."""
        version = SemVer.parse("v10.0.7")

        self.assertEqual(version.leading_v, "v")
        self.assertEqual(version.core, (10, 0, 7))

    def test_parse_extended(self):
        """Test parsing branch, distance and hash metadata."""
        version = parse_semver("v1.3.0-featurex.12.abc1234")

        self.assertEqual(version.core, (1, 3, 0))
        self.assertEqual(
            version.ext,
            SemVerExtended(branch="featurex", commit_distance=12, commit_hash="abc1234"),
        )

    def test_parse_prefix(self):
        """Test parsing a mono-repo module prefix."""
        version = SemVer.parse("my-module-v2.0.1")

        self.assertEqual(version.prefix, "my-module")
        self.assertEqual(version.leading_v, "v")
        self.assertEqual(version.core, (2, 0, 1))

    def test_parse_prefix_with_extended(self):
        """Test that the extended suffix is not mistaken for a prefix."""
        version = SemVer.parse("api-v1.2.3-main.4.deadbee")

        self.assertEqual(version.prefix, "api")
        self.assertEqual(version.core, (1, 2, 3))
        self.assertEqual(version.ext.branch, "main")
        self.assertEqual(version.ext.commit_distance, 4)

    def test_round_trip(self):
        """Test that rendering a parsed tag reproduces it."""
        for text in [
            "0.1.0",
            "v1.2.3",
            "v1.3.0-featurex.1.abc1234",
            "api-1.0.0",
            "api-v4.5.6-HEAD.0.0123456",
        ]:
            with self.subTest(text=text):
                self.assertEqual(SemVer.parse(text).render(), text)

    def test_parse_invalid(self):
        """Test that non-versions are rejected."""
        for text in ["", "latest", "1.2", "v1.2.x", "release-1.2"]:
            with self.subTest(text=text):
                with self.assertRaises(ParseError):
                    SemVer.parse(text)

    def test_parse_ignores_surrounding_text(self):
        """Test pre-release, build and path decorations around the version."""
        for text, expected in [
            ("v1.2.3-rc1", "v1.2.3"),
            ("v1.2.3+build.5", "v1.2.3"),
            ("module/v1.2.3", "v1.2.3"),
            ("1.2.3-", "1.2.3"),
        ]:
            with self.subTest(text=text):
                version = SemVer.parse(text)
                self.assertEqual(version.core, (1, 2, 3))
                self.assertIsNone(version.ext)
                self.assertEqual(version.render(), expected)

    def test_parse_overflow_names_component(self):
        """Test that out of range components are reported by name."""
        with self.assertRaises(ParseError) as ctx:
            SemVer.parse("1.4294967296.0")

        self.assertEqual(ctx.exception.details["component"], "minor")
        self.assertIn("minor", str(ctx.exception))

    def test_parse_error_stage(self):
        """Test that parse errors carry their stage."""
        with self.assertRaises(ParseError) as ctx:
            SemVer.parse("nope")

        self.assertTrue(str(ctx.exception).startswith("[Parse]"))


class TestSemVerOperations(unittest.TestCase):
    """Tests for comparison, increments and metadata."""

    def test_initial(self):
        """Test the first release version."""
        version = SemVer.initial()

        self.assertEqual(version.render(), "0.1.0")
        self.assertIsNone(version.ext)

    def test_greater_than(self):
        """Test lexicographic comparison of the triple."""
        self.assertTrue(SemVer(2, 0, 0).greater_than(SemVer(1, 9, 9)))
        self.assertTrue(SemVer(1, 3, 0).greater_than(SemVer(1, 2, 9)))
        self.assertTrue(SemVer(1, 2, 4).greater_than(SemVer(1, 2, 3)))
        self.assertFalse(SemVer(1, 2, 3).greater_than(SemVer(1, 2, 4)))

    def test_greater_than_ignores_metadata(self):
        """Test that equal triples are never greater in either direction."""
        a = SemVer(1, 2, 3).set_branch("main").set_commit_distance(5)
        b = SemVer(1, 2, 3, leading_v="v").set_branch("dev")

        self.assertFalse(a.greater_than(b))
        self.assertFalse(b.greater_than(a))

    def test_same_branch(self):
        """Test branch comparison of extended metadata."""
        main = SemVer(1, 0, 0).set_branch("main")
        other_main = SemVer(2, 0, 0).set_branch("main")
        feature = SemVer(1, 0, 0).set_branch("feature")

        self.assertTrue(main.same_branch(other_main))
        self.assertFalse(main.same_branch(feature))
        self.assertFalse(main.same_branch(SemVer(1, 0, 0)))
        self.assertFalse(SemVer(1, 0, 0).same_branch(main))
        self.assertFalse(main.same_branch(None))

    def test_increments(self):
        """Test that increments reset lower components."""
        version = SemVer(1, 2, 3, prefix="api", leading_v="v")

        self.assertEqual(version.inc_major().core, (2, 0, 0))
        self.assertEqual(version.inc_minor().core, (1, 3, 0))
        self.assertEqual(version.inc_patch().core, (1, 2, 4))

        for bumped in (version.inc_major(), version.inc_minor(), version.inc_patch()):
            self.assertEqual(bumped.prefix, "api")
            self.assertEqual(bumped.leading_v, "v")

        self.assertEqual(version.core, (1, 2, 3))

    def test_increment_carries_metadata_copy(self):
        """Test that metadata is carried over without aliasing."""
        version = SemVer(1, 0, 0).set_branch("dev").set_commit_distance(3)
        bumped = version.inc_minor()

        self.assertEqual(bumped.ext, version.ext)

        bumped.set_branch("other")
        self.assertEqual(version.ext.branch, "dev")

    def test_setters_allocate_and_chain(self):
        """Test lazy allocation of extended metadata."""
        version = SemVer(1, 0, 0)
        self.assertIsNone(version.ext)

        result = version.set_commit_distance(7)

        self.assertIs(result, version)
        self.assertEqual(version.ext, SemVerExtended("", 7, ""))

    def test_set_commit_hash(self):
        """Test abbreviation of commit hashes."""
        self.assertEqual(SemVer().set_commit_hash("abc").ext.commit_hash, "abc")
        self.assertEqual(SemVer().set_commit_hash("abcdef1234").ext.commit_hash, "abcdef1")
        self.assertEqual(SemVer().set_commit_hash("abcdef1").ext.commit_hash, "abcdef1")


class TestSemVerRender(unittest.TestCase):
    """Tests for formatting versions."""

    def _extended(self):
        return (
            SemVer(1, 3, 0, leading_v="v")
            .set_branch("feature/x")
            .set_commit_distance(1)
            .set_commit_hash("0123456789abcdef")
        )

    def test_render_extended(self):
        """Test rendering with sanitized branch name."""
        self.assertEqual(self._extended().render(), "v1.3.0-featurex.1.0123456")
        self.assertEqual(str(self._extended()), "v1.3.0-featurex.1.0123456")

    def test_render_release(self):
        """Test that release rendering drops metadata."""
        self.assertEqual(self._extended().render(release=True), "v1.3.0")

    def test_render_prefix(self):
        """Test prefix joining."""
        version = self._extended()
        version.prefix = "svc"

        self.assertEqual(version.render(release=True), "svc-v1.3.0")
        self.assertEqual(version.render(), "svc-v1.3.0-featurex.1.0123456")

    def test_render_without_metadata(self):
        """Test that versions without metadata print the triple only."""
        self.assertEqual(SemVer(0, 1, 0).render(release=False), "0.1.0")


if __name__ == "__main__":
    unittest.main()
