import numpy as np
import pandas as pd
import pytest

from tenant_topics.report import (
    document_report,
    format_counts,
    format_proportions,
    primary_topic_counts,
    primary_topics,
    print_report,
    top_terms,
    topic_names,
    topic_proportions,
)
from tenant_topics.topic_model import TopicModel


def _model(doc_topics, topic_terms=None, terms=None):
    doc_topics = np.asarray(doc_topics, dtype=float)
    k = doc_topics.shape[1]
    if topic_terms is None:
        topic_terms = np.full((k, k + 5), 1.0 / (k + 5))
    topic_terms = np.asarray(topic_terms, dtype=float)
    if terms is None:
        terms = np.array([f"w{i}" for i in range(topic_terms.shape[1])])
    return TopicModel(topic_terms=topic_terms, doc_topics=doc_topics, terms=terms,
                      seed=0, iterations=1)


TERMS = np.array(["bill", "fee", "late", "move", "rent", "transfer"])
TOPIC_TERMS = [
    [0.30, 0.25, 0.25, 0.05, 0.10, 0.05],
    [0.05, 0.05, 0.05, 0.35, 0.10, 0.40],
]


def test_primary_topic_is_the_max():
    assert primary_topics(_model([[0.3, 0.3, 0.4]]))[0] == 2


def test_primary_topic_tie_goes_to_lowest_index():
    assert primary_topics(_model([[0.5, 0.5]]))[0] == 0
    assert primary_topics(_model([[0.2, 0.4, 0.4]]))[0] == 1


def test_top_terms_ordered_with_stable_ties():
    model = _model([[0.5, 0.5]], TOPIC_TERMS, TERMS)
    table = top_terms(model, 3)
    assert list(table.columns) == ["Topic 1", "Topic 2"]
    # fee and late tie at 0.25: vocabulary order decides
    assert table["Topic 1"].tolist() == ["bill", "fee", "late"]
    assert table["Topic 2"].tolist() == ["transfer", "move", "rent"]


def test_top_terms_capped_at_vocabulary_size():
    model = _model([[0.5, 0.5]], TOPIC_TERMS, TERMS)
    assert len(top_terms(model, 50)) == len(TERMS)


def test_topic_names_join_top_five():
    model = _model([[0.5, 0.5]], TOPIC_TERMS, TERMS)
    assert topic_names(model) == ["bill fee late rent move", "transfer move rent bill fee"]
    assert topic_names(model, 2) == ["bill fee", "transfer move"]


def test_topic_proportions_sorted_descending():
    model = _model([[0.2, 0.8], [0.4, 0.6]])
    props = topic_proportions(model, ["billing", "transfer"])
    assert props.index.tolist() == ["transfer", "billing"]
    np.testing.assert_allclose(props.to_numpy(), [0.7, 0.3])


def test_primary_topic_counts_include_empty_topics():
    model = _model([[0.1, 0.9, 0.0], [0.2, 0.7, 0.1], [0.6, 0.3, 0.1]])
    counts = primary_topic_counts(model, ["a", "b", "c"])
    assert counts.to_dict() == {"b": 2, "a": 1, "c": 0}
    assert counts.index.tolist() == ["b", "a", "c"]


def test_primary_topic_counts_ties_keep_topic_order():
    model = _model([[0.9, 0.1], [0.1, 0.9]])
    assert primary_topic_counts(model, ["a", "b"]).index.tolist() == ["a", "b"]


def test_document_report_aligned_with_comments():
    model = _model([[0.9, 0.1], [0.2, 0.8]])
    comments = pd.Series(["Late fee again", "Move my service"], index=[3, 9])
    report = document_report(model, comments, ["billing", "transfer"])
    assert report.index.tolist() == [3, 9]
    assert report["topic"].tolist() == [1, 2]
    assert report["topic_name"].tolist() == ["billing", "transfer"]
    assert report["comment"].tolist() == ["Late fee again", "Move my service"]


def test_document_report_length_mismatch():
    with pytest.raises(ValueError):
        document_report(_model([[0.5, 0.5]]), pd.Series(["a", "b"]))


def test_format_lines():
    props = pd.Series([0.6666666, 0.3333333], index=["rent", "fee"])
    assert format_proportions(props) == ["0.66667 : rent", "0.33333 : fee"]
    assert format_proportions(props, digits=2) == ["0.67 : rent", "0.33 : fee"]
    assert format_counts(pd.Series([4, 1], index=["rent", "fee"])) == ["4 : rent", "1 : fee"]


def test_print_report(capsys):
    model = _model([[0.9, 0.1], [0.2, 0.8]], TOPIC_TERMS, TERMS)
    print_report(model, pd.Series(["Late fee again", "Move my service"]))
    out = capsys.readouterr().out
    assert "-- Top terms per topic --" in out
    assert "1 : bill fee late rent move" in out
    assert "Move my service" in out


def test_report_on_fitted_model(toy_model, toy_dtm):
    report = document_report(toy_model, toy_dtm.comments)
    assert len(report) == toy_dtm.n_documents
    assert primary_topic_counts(toy_model).sum() == toy_dtm.n_documents
    assert topic_proportions(toy_model).sum() == pytest.approx(1.0)
