"""
Configuration constants for the tenant comment topic modeling pipeline:
- DATA_PATH / TEXT_COLUMN: raw CSV dataset and the column holding comments
- STOPWORDS_SOURCE: local path or URL of a newline-delimited stopword list
- MIN_FREQUENCY: minimum number of documents a term must appear in
- TOPIC_RANGE: candidate topic counts evaluated by the selection sweep
- N_TOPICS: topic count of the final model (picked from the sweep plot)
- GIBBS_PARAMS / SELECTION_PARAMS: sampler settings for the final fit and the sweep
"""
DATA_PATH = "../data/landlord_tenant_comments.csv"  # CSV file location
TEXT_COLUMN = "comments"  # Column containing the free-text comments
STOPWORDS_SOURCE = "https://slcladal.github.io/resources/stopwords_en.txt"  # One word per line
LANGUAGE = "english"  # Snowball stemmer language

MIN_FREQUENCY = 2  # Drop terms occurring in fewer documents than this
TOPIC_RANGE = range(2, 21)  # Candidate K values, 2..20 inclusive
N_TOPICS = 20  # Number of topics of the final model
SEED = 9161  # Random seed shared by the sweep and the final fit
ITERATIONS = 500  # Gibbs sampling iterations of the final fit

GIBBS_PARAMS = dict(
    alpha=None,   # Doc-topic prior, None means 50 / K
    beta=0.1,     # Topic-term prior
    burnin=0,     # Iterations discarded before recording log-likelihoods
    thin=1        # Record every n-th iteration after burn-in
)
SELECTION_PARAMS = dict(
    iterations=ITERATIONS,
    burnin=100,   # Griffiths2004 needs a burnt-in log-likelihood trace
    thin=10
)
SELECTION_METRICS = (
    "Griffiths2004",  # maximize
    "CaoJuan2009",    # minimize
    "Arun2010",       # minimize
    "Deveaud2014",    # maximize
    "CV"              # gensim c_v coherence, maximize
)
N_JOBS = -1  # joblib workers for the sweep

N_TOP_TERMS = 10  # Rows of the top-terms table
N_NAME_TERMS = 5  # Terms joined into a topic name
SELECTION_PLOT = None  # Save the sweep plot here instead of showing it
