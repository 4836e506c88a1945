import argparse
import logging
import sys

from tenant_topics.config import (
    DATA_PATH,
    ITERATIONS,
    MIN_FREQUENCY,
    N_TOPICS,
    SEED,
    SELECTION_PLOT,
    STOPWORDS_SOURCE,
    TEXT_COLUMN,
)
from tenant_topics.data import load_comments, load_stopwords, token_statistics
from tenant_topics.errors import TopicPipelineError
from tenant_topics.preprocessing import preprocess_series
from tenant_topics.report import print_report
from tenant_topics.selection import evaluate_topic_counts, plot_topic_counts, suggest_topic_count
from tenant_topics.topic_model import fit_topic_model
from tenant_topics.vectorization import build_dtm, term_frequencies, top_tfidf_terms

logger = logging.getLogger(__name__)

def run_pipeline(
    data_path: str = DATA_PATH,
    stopwords_source: str = STOPWORDS_SOURCE,
    plot_path: str = SELECTION_PLOT,
    run_selection: bool = True,
    n_topics: int = N_TOPICS,
    column: str = TEXT_COLUMN
):
    """
    Full workflow:
      1. Load comments and stopwords
      2. Preprocess text
      3. Build the pruned document-term matrix
      4. Sweep candidate topic counts and plot the metrics
      5. Fit the final model with the chosen K
      6. Print topics, proportions and per-comment assignments

    Returns:
        TopicModel: The fitted final model.
    """
    # Step 1: Data
    comments = load_comments(data_path, column)
    stopwords = load_stopwords(stopwords_source)
    raw_stats, _ = token_statistics(comments)
    logger.info(f"Raw corpus: {raw_stats.to_dict('records')[0]}")

    # Step 2: Preprocessing
    clean = preprocess_series(comments, stopwords)
    clean_stats, _ = token_statistics(clean)
    logger.info(f"Clean corpus: {clean_stats.to_dict('records')[0]}")

    # Step 3: Document-term matrix
    dtm = build_dtm(clean, comments, min_frequency=MIN_FREQUENCY)
    logger.info(f"Most frequent terms: {', '.join(term_frequencies(dtm, 10).index)}")
    logger.info(f"Top TF-IDF terms: {', '.join(top_tfidf_terms(dtm, 10).index)}")

    # Step 4: Topic-count diagnostics
    if run_selection:
        table = evaluate_topic_counts(dtm, seed=SEED)
        plot_topic_counts(table, plot_path)
        logger.info(f"Suggested topic count: {suggest_topic_count(table)} "
                    f"(using configured {n_topics})")

    # Step 5: Final model
    model = fit_topic_model(dtm, n_topics, seed=SEED, iterations=ITERATIONS)

    # Step 6: Reporting
    print_report(model, dtm.comments)
    return model

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="LDA topic modeling of tenant comments")
    parser.add_argument("--data", default=DATA_PATH, help="CSV file with the comments")
    parser.add_argument("--stopwords", default=STOPWORDS_SOURCE,
                        help="stopword list, local path or URL")
    parser.add_argument("--plot", default=SELECTION_PLOT,
                        help="save the topic-count plot here instead of showing it")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
    )
    try:
        run_pipeline(args.data, args.stopwords, args.plot)
    except TopicPipelineError as exc:
        logger.error(f"{type(exc).__name__}: {exc}")
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
