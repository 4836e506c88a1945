import numpy as np

from tenant_topics.main import main, run_pipeline


def test_run_pipeline_end_to_end(comments_csv, stopword_file, capsys):
    model = run_pipeline(comments_csv, stopword_file, run_selection=False, n_topics=2)
    out = capsys.readouterr().out

    assert model.n_topics == 2
    np.testing.assert_allclose(model.doc_topics.sum(axis=1), 1.0, atol=1e-6)
    assert "-- Topic proportions --" in out
    assert "-- Primary topic counts --" in out
    assert "Please transfer the service" in out


def test_run_pipeline_with_selection_plot(comments_csv, stopword_file, tmp_path, monkeypatch):
    from tenant_topics import main as main_module

    calls = {}

    def small_sweep(dtm, seed):
        from tenant_topics.selection import evaluate_topic_counts
        calls["seed"] = seed
        return evaluate_topic_counts(dtm, [2, 3], ["CaoJuan2009", "Arun2010"], seed=seed,
                                     iterations=10, n_jobs=1)

    monkeypatch.setattr(main_module, "evaluate_topic_counts", small_sweep)
    plot = tmp_path / "sweep.png"
    run_pipeline(comments_csv, stopword_file, plot_path=str(plot), n_topics=2)
    assert plot.exists()
    assert "seed" in calls


def test_main_reports_missing_input(tmp_path, stopword_file):
    assert main(["--data", str(tmp_path / "missing.csv"), "--stopwords", stopword_file]) == 1


def test_main_reports_unreadable_input(tmp_path, stopword_file):
    assert main(["--data", str(tmp_path), "--stopwords", stopword_file]) == 1
