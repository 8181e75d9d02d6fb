"""Tests for Markdown normalization passes."""

import itertools

import pytest
from markeddown.conversion.normalizer import (
    ADJACENCY_REPAIR_PASSES,
    CORE_PASSES,
    LINK_REPAIR_PASSES,
    REPAIR_PREPARE_PASSES,
    MarkdownNormalizer,
    collapse_blank_lines,
    collapse_duplicate_links,
    decode_entities,
    fix_image_formatting,
    fix_image_spacing,
    hoist_link_headings,
    normalize,
    normalize_line_endings,
    remove_empty_headings,
    separate_headings,
    separate_images,
    separate_lists,
    split_image_links,
)
from markeddown.models.config import NormalizerConfig

ALL_REPAIRS = LINK_REPAIR_PASSES + ADJACENCY_REPAIR_PASSES

SAMPLES = [
    "",
    "   ",
    "# Title\r\n\r\n\r\n\r\nBody &amp; more",
    "&amp;lt;b&amp;gt; double encoded",
    "Look ! [ alt ](/a.png)text",
    "Intro\n##\n\n\n## Real\ntext",
    "[Some text\n\n## Heading\nmore](http://x)",
    "See [intro\n### Setup\nsteps](/s) now",
    "[Home](/) [Home](/)\n[Home](/)",
    "[![Logo](/logo.png)\nOur\n## team](/team) after",
    "[![Logo](/logo.png)](/)",
    "Text![a](/a.png)more ![b](/b.png)\n![c](/c.png) [link](/l)",
    "Para\n- one\n- two\nAfter\n1. first",
    "[Docs](/docs) ## Next\n#\n",
    "```\n# comment\n[a\n## b](/c)\n```\nafter ## not\n# \n",
    "Escaped [paren](/a\\)b) and ![img](/x\\(1\\).png)",
    "a\n#\nb\n\n#\n\nc",
    "Wow! [link](/x)",
    " a\n- a",
    "a\n #\n- a",
]

# Whole lines combined into small documents for the exhaustive idempotence check
LINE_FRAGMENTS = [
    "",
    "a",
    " a",
    "- a",
    "  - b",
    "1. c",
    "#",
    " #",
    "## H",
    "![i](/i.png)",
    "[l](/l)",
]


def _documents(max_lines=3):
    for count in range(1, max_lines + 1):
        for lines in itertools.product(LINE_FRAGMENTS, repeat=count):
            yield "\n".join(lines)



class TestCorePasses:
    """Tests for the six core passes."""

    def test_line_endings(self):
        """Test CRLF and CR become LF."""
        assert normalize_line_endings("a\r\nb\rc\n") == "a\nb\nc\n"

    def test_decode_entities(self):
        """Test character references are decoded."""
        assert decode_entities("Fish &amp; Chips &lt;3 &#8212; &hellip;") == "Fish & Chips <3 — …"

    def test_decode_entities_until_stable(self):
        """Test double-encoded references are fully decoded."""
        assert decode_entities("&amp;lt;b&amp;gt;") == "<b>"

    def test_image_marker_spacing(self):
        """Test ! [ is joined and bracket padding trimmed."""
        assert fix_image_spacing("! [ alt ](/a.png)") == "![alt](/a.png)"
        assert fix_image_spacing("[  Home\t](/)") == "[Home](/)"

    def test_image_spacing_keeps_line_breaks(self):
        """Test line breaks inside brackets are left for the link repairs."""
        assert fix_image_spacing("[text\n## Heading\n](/x)") == "[text\n## Heading\n](/x)"

    def test_collapse_blank_lines(self):
        """Test three or more newlines become two."""
        assert collapse_blank_lines("a\n\n\n\nb\n\nc") == "a\n\nb\n\nc"

    def test_remove_empty_headings(self):
        """Test heading lines with no text are deleted."""
        assert remove_empty_headings("# Title\n##\ntext\n  ###  \nend") == "# Title\ntext\nend"

    def test_remove_empty_headings_does_not_leave_blank_runs(self):
        """Test deleting a line between blank lines keeps one blank line."""
        assert remove_empty_headings("a\n\n#\n\nb") == "a\n\nb"

    def test_remove_empty_heading_at_end(self):
        """Test an empty heading on the last line is deleted."""
        assert remove_empty_headings("text\n#") == "text\n"

    def test_keeps_real_headings(self):
        """Test headings with text and hashtags survive."""
        text = "# Title\n#hashtag"
        assert remove_empty_headings(text) == text

    def test_full_core_sequence(self):
        """Test the core sequence end to end."""
        raw = "\r\n\r\n# Title\r\n\r\n\r\n\r\n##\r\n\r\nFish &amp; Chips ! [ pic ](/p.png)\r\n\r\n"
        assert normalize(raw) == "# Title\n\nFish & Chips ![pic](/p.png)"

    def test_core_pass_order(self):
        """Test the normalizer runs exactly the core passes by default."""
        assert MarkdownNormalizer().passes == CORE_PASSES


class TestLinkRepairs:
    """Tests for broken link and heading repair."""

    def test_heading_hoisted_out_of_link(self):
        """Test a heading line inside link text becomes its own block."""
        result = hoist_link_headings("[Some text\n\n## Heading\nmore](http://x)")
        assert result == "## Heading\n\n[Some text more](http://x)"

    def test_heading_only_link_uses_url(self):
        """Test a link left without text uses its URL as text."""
        result = hoist_link_headings("[\n## Heading\n](http://x)")
        assert result == "## Heading\n\n[http://x](http://x)"

    def test_hoisted_heading_starts_new_block(self):
        """Test text before the link is separated from the heading."""
        assert hoist_link_headings("See [a\n# H](/u)") == "See \n\n# H\n\n[a](/u)"
        assert hoist_link_headings("See\n[a\n# H](/u)") == "See\n\n# H\n\n[a](/u)"

    def test_several_headings(self):
        """Test every heading line is hoisted in order."""
        result = hoist_link_headings("[# One\ntext\n## Two](/u)")
        assert result == "# One\n\n## Two\n\n[text](/u)"

    def test_single_line_link_text_is_kept(self):
        """Test a single-line link starting with # is not treated as a heading."""
        assert hoist_link_headings("[# of items](/count)") == "[# of items](/count)"

    def test_link_text_whitespace_collapsed(self):
        """Test multi-line link text is joined onto one line."""
        assert hoist_link_headings("[Read\n  more](/more)") == "[Read more](/more)"

    def test_images_are_not_links(self):
        """Test image alt text is not treated as link text."""
        text = "![alt\n## Heading](/a.png)"
        assert hoist_link_headings(text) == text

    def test_never_crosses_closing_paren(self):
        """Test matching stops at the parenthesis closing the URL."""
        text = "[a](/x) text) [b\n## H](/y)"
        assert hoist_link_headings(text) == "[a](/x) text) \n\n## H\n\n[b](/y)"

    def test_escaped_paren_in_url(self):
        """Test escaped parentheses stay part of the URL."""
        assert hoist_link_headings("[a\nb](/x\\)y)") == "[a b](/x\\)y)"

    def test_duplicate_links_collapsed(self):
        """Test back-to-back identical links collapse to one."""
        assert collapse_duplicate_links("[Home](/) [Home](/)") == "[Home](/)"
        assert collapse_duplicate_links("[Home](/)\n[Home](/)\n\n[Home](/) end") == "[Home](/) end"

    def test_different_links_kept(self):
        """Test links differing in text or URL are kept."""
        text = "[Home](/) [Home](/index) [Start](/)"
        assert collapse_duplicate_links(text) == text

    def test_image_before_link_not_collapsed(self):
        """Test an image and a link with the same text and URL are both kept."""
        text = "![Home](/) [Home](/)"
        assert collapse_duplicate_links(text) == text

    def test_image_link_with_caption(self):
        """Test a linked image with caption is split into image and caption link."""
        result = split_image_links("[![Logo](/logo.png) Our team](/team)")
        assert result == "![Logo](/logo.png) [Our team](/team)"

    def test_image_link_multiline_caption(self):
        """Test caption lines are joined and heading markers dropped."""
        result = split_image_links("[ ![A](/a.png)\nLine one\n## line two](/p)")
        assert result == "![A](/a.png) [Line one line two](/p)"

    def test_image_link_without_caption(self):
        """Test only the image survives when the caption is empty."""
        assert split_image_links("[![Logo](/logo.png)](/)") == "![Logo](/logo.png)"
        assert split_image_links("[![Logo](/logo.png)\n  ](/)") == "![Logo](/logo.png)"


class TestAdjacencyRepairs:
    """Tests for blank line insertion around headings, images and lists."""

    def test_heading_after_text(self):
        """Test a heading directly under text gets a blank line."""
        assert separate_headings("Para\n## Head\ntext") == "Para\n\n## Head\ntext"

    def test_heading_already_separated(self):
        """Test separated headings are left alone."""
        text = "# Title\n\nPara\n\n## Head"
        assert separate_headings(text) == text

    def test_inline_heading_after_link(self):
        """Test a heading marker after a link moves to its own block."""
        assert separate_headings("[Docs](/docs) ## Next") == "[Docs](/docs)\n\n## Next"

    def test_fenced_code_untouched(self):
        """Test repairs skip fenced code blocks."""
        text = "Text\n```\nfoo\n# comment\n```\nMore\n## H"
        assert separate_headings(text) == "Text\n```\nfoo\n# comment\n```\nMore\n\n## H"

    def test_image_glued_to_text(self):
        """Test images glued to text on either side are separated."""
        assert separate_images("Text![a](/a.png)more") == "Text\n\n![a](/a.png)\n\nmore"

    def test_adjacent_images(self):
        """Test images separated only by whitespace get one blank line between them."""
        assert separate_images("![a](/a.png) ![b](/b.png)\n![c](/c.png)") == (
            "![a](/a.png)\n\n![b](/b.png)\n\n![c](/c.png)"
        )

    def test_image_then_link(self):
        """Test an image followed by a link on the same line is split."""
        assert separate_images("![a](/a.png) [more](/m)") == "![a](/a.png)\n\n[more](/m)"

    def test_linked_image_untouched(self):
        """Test an image inside link brackets is left for the link repairs."""
        text = "[![a](/a.png)](/x)"
        assert separate_images(text) == text

    def test_image_formatting(self):
        """Test whitespace inside image syntax is tidied."""
        assert fix_image_formatting("![ my  pic ] ( /a.png )") == "![my pic](/a.png)"

    def test_list_after_paragraph(self):
        """Test a list directly under a paragraph line gets a blank line."""
        assert separate_lists("Intro:\n- one\n- two") == "Intro:\n\n- one\n- two"
        assert separate_lists("Steps\n1. first\n2) second") == "Steps\n\n1. first\n2) second"

    def test_list_continuations_untouched(self):
        """Test nested items, continuations and bold text are left alone."""
        text = "- one\n  continued\n  - nested\n**Bold** text\n# Head\n- item"
        assert separate_lists(text) == text


class TestMarkdownNormalizer:
    """Tests for the composed pipeline."""

    def test_from_config_default(self):
        """Test both repair families are enabled by default."""
        normalizer = MarkdownNormalizer.from_config(NormalizerConfig())
        assert normalizer.passes[:3] == CORE_PASSES[:3]
        assert normalizer.passes[3:5] == REPAIR_PREPARE_PASSES
        assert normalizer.passes[5:-3] == ALL_REPAIRS
        assert normalizer.passes[-3:] == CORE_PASSES[3:]

    def test_from_config_without_repairs(self):
        """Test repairs can be switched off."""
        config = NormalizerConfig(repair_links=False, repair_adjacency=False)
        assert MarkdownNormalizer.from_config(config).passes == CORE_PASSES

    def test_link_heading_repair_end_to_end(self):
        """Test the hoisted heading ends up as its own block."""
        result = normalize("Intro\n[Some text\n\n## Heading\nmore](http://x)", repairs=ALL_REPAIRS)
        assert result == "Intro\n\n## Heading\n\n[Some text more](http://x)"

    def test_image_caption_link_end_to_end(self):
        """Test a captioned image link becomes an image block and a caption link."""
        result = normalize("[![Logo](/logo.png) Our team](/team)", repairs=ALL_REPAIRS)
        assert result == "![Logo](/logo.png)\n\n[Our team](/team)"

    def test_output_contract(self):
        """Test the output has no CR, no blank runs, no empty headings and no outer whitespace."""
        result = normalize("\r\n  # A\r\n\r\n\r\n\r\n#\r\n\r\n\r\nB  \r\n", repairs=ALL_REPAIRS)
        assert "\r" not in result
        assert "\n\n\n" not in result
        assert result == result.strip()
        assert all(line.strip("# \t") or not line.strip() for line in result.split("\n"))

    @pytest.mark.parametrize("sample", SAMPLES)
    def test_core_idempotent(self, sample):
        """Test normalizing twice equals normalizing once."""
        once = normalize(sample)
        assert normalize(once) == once

    @pytest.mark.parametrize("sample", SAMPLES)
    def test_idempotent_with_repairs(self, sample):
        """Test the full pipeline with repairs is idempotent."""
        once = normalize(sample, repairs=ALL_REPAIRS)
        assert normalize(once, repairs=ALL_REPAIRS) == once

    def test_list_after_indented_first_line_is_stable(self):
        """Test a list under an indented first line gets its blank line on the first run."""
        once = normalize(" a\n- a", repairs=ALL_REPAIRS)
        assert once == "a\n\n- a"
        assert normalize(once, repairs=ALL_REPAIRS) == once

    def test_list_after_empty_heading_is_stable(self):
        """Test an empty heading between a paragraph and a list does not hide the paragraph."""
        once = normalize("a\n #\n- a", repairs=ALL_REPAIRS)
        assert once == "a\n\n- a"
        assert normalize(once, repairs=ALL_REPAIRS) == once

    def test_idempotent_over_line_combinations(self):
        """Test idempotence with repairs for every small combination of line shapes."""
        failures = []
        for document in _documents():
            once = normalize(document, repairs=ALL_REPAIRS)
            if normalize(once, repairs=ALL_REPAIRS) != once:
                failures.append(document)
        assert failures == []
