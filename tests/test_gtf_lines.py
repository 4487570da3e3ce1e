import pytest

from gtfreader.io.gtf import (
    NO_FRAME,
    NO_SCORE,
    GTFDecodeError,
    decode_frame,
    decode_line,
    decode_score,
    parse_attributes,
    parse_line,
    sanitize_attr_value,
    sanitize_line,
    valid_line,
)

EXON = 'chrX\tensembl\texon\t100\t200\t0.5\t+\t1\tgene_id "G1";'


def test_sanitize_strips_comment_and_blanks() -> None:
    assert sanitize_line("  chr1\tsrc\t# note") == "chr1\tsrc"
    assert sanitize_line("# just a comment") == ""
    assert sanitize_line("\t \t") == ""
    assert sanitize_line("") == ""


def test_sanitize_keeps_inner_tabs() -> None:
    assert sanitize_line("\ta\tb\t") == "a\tb"


def test_valid_line_accepts_minimal_record() -> None:
    assert valid_line("chr1\tsrcA\tgene\t1\t10\t.\t+\t0")
    assert valid_line(EXON)


@pytest.mark.parametrize(
    "line",
    [
        "",
        "chr1\tsrcA\tgene\t1\t10",
        "chr1\tsrcA\tgene\tx\t10\t.\t+\t0",
        "chr1\tsrcA\tgene\t1\t1e3\t.\t+\t0",
        "chr1 srcA gene 1 10 . + 0",
    ],
)
def test_valid_line_rejects_malformed(line: str) -> None:
    assert not valid_line(line)


def test_attributes_strip_quotes() -> None:
    attrs = parse_attributes('gene_id "ABC123"; transcript_id "XYZ";')
    assert attrs == {"gene_id": "ABC123", "transcript_id": "XYZ"}
    assert all('"' not in value for value in attrs.values())


def test_attributes_keep_inner_spaces_and_unquoted_values() -> None:
    attrs = parse_attributes('gene_name "my gene"; level 2;')
    assert attrs == {"gene_name": "my gene", "level": "2"}


def test_attributes_last_write_wins() -> None:
    attrs = parse_attributes('tag "basic"; tag "CCDS";')
    assert attrs == {"tag": "CCDS"}


def test_attributes_trailing_key_without_separator() -> None:
    assert parse_attributes('gene_id "A"; orphan') == {"gene_id": "A", "orphan": ""}
    assert parse_attributes("") == {}


def test_attr_value_strips_one_quote_layer_only() -> None:
    assert sanitize_attr_value(' ""x"" ') == '"x"'
    assert sanitize_attr_value('"') == ""
    assert sanitize_attr_value("  ") == ""


def test_score_sentinel_and_value() -> None:
    assert decode_score(".") == NO_SCORE
    assert decode_score("3.14") == pytest.approx(3.14)
    assert decode_score("1e3") == 1000.0
    assert decode_score("-.5") == -0.5


def test_irregular_score_is_permissive_by_default() -> None:
    assert decode_score("3.14abc") == pytest.approx(3.14)
    assert decode_score("abc") == 0.0


def test_irregular_score_raises_when_strict() -> None:
    with pytest.raises(GTFDecodeError):
        decode_score("abc", strict=True)
    with pytest.raises(GTFDecodeError):
        decode_score("3.14abc", strict=True)
    assert decode_score("3.14", strict=True) == pytest.approx(3.14)


def test_frame_decoding() -> None:
    assert decode_frame("2") == 2
    assert decode_frame(".") == NO_FRAME
    assert decode_frame("x") == NO_FRAME
    with pytest.raises(GTFDecodeError):
        decode_frame("x", strict=True)


def test_decode_line_fields() -> None:
    record = decode_line(EXON)
    assert record.seqname == "chrX"
    assert record.source == "ensembl"
    assert record.feature == "exon"
    assert (record.start, record.end) == (100, 200)
    assert record.score == pytest.approx(0.5)
    assert record.has_score()
    assert record.strand == "+"
    assert record.frame == 1
    assert record.attributes == {"gene_id": "G1"}
    assert record.has_attribute("gene_id")
    assert not record.has_attribute("transcript_id")
    assert record.length == 101


def test_decode_is_idempotent() -> None:
    assert decode_line(EXON) == decode_line(EXON)


def test_missing_score_and_frame() -> None:
    record = decode_line("chr1\tsrcA\tgene\t1\t10\t.\t-\t.")
    assert not record.has_score()
    assert record.score == NO_SCORE
    assert not record.has_frame()
    assert record.strand == "-"
    assert record.attributes == {}


def test_trailing_comment_does_not_change_record() -> None:
    with_comment = parse_line("chr1\tsrcA\tgene\t1\t10\t.\t+\t0\t# trailing comment")
    without = parse_line("chr1\tsrcA\tgene\t1\t10\t.\t+\t0")
    assert with_comment is not None
    assert with_comment == without


def test_hash_inside_quoted_value_starts_comment() -> None:
    record = parse_line('chr1\tsrc\tgene\t1\t10\t.\t+\t0\tgene_id "A1"; note "a#b";')
    assert record is not None
    assert record.attributes == {"gene_id": "A1", "note": "a"}


def test_parse_line_skips_blank_and_comment_lines() -> None:
    assert parse_line("") is None
    assert parse_line("# just a comment\n") is None
    assert parse_line("chr1\tsrcA\tgene\t1\t10\n") is None


def test_parse_line_drops_line_terminators() -> None:
    record = parse_line(EXON + "\r\n")
    assert record is not None
    assert record.attributes == {"gene_id": "G1"}


@pytest.mark.parametrize("sep", ["\xa0", "\u2003", "\x1f"])
def test_non_ascii_whitespace_stays_inside_fields(sep: str) -> None:
    line = f"chr{sep}1\tsrc\tgene\t1\t10\t.\t+\t0"
    assert valid_line(line)

    record = decode_line(line)

    assert record.seqname == f"chr{sep}1"
    assert record.feature == "gene"
    assert (record.start, record.end) == (1, 10)
    assert parse_line(line) == record


def test_literal_inf_score_reads_as_missing() -> None:
    record = decode_line("chr1\tsrcA\tgene\t1\t10\tinf\t+\t0")
    assert record.score == NO_SCORE
    assert not record.has_score()
