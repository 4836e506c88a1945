import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest

from tenant_topics.topic_model import GibbsSamplingLDA
from tenant_topics.vectorization import build_dtm

BILLING = [
    "bill payment invoic charg bill payment late fee",
    "payment bill fee charg invoic late bill payment",
    "invoic charg payment fee bill late invoic charg",
]
TRANSFER = [
    "transfer servic account move address connect transfer servic",
    "servic transfer address move account connect servic account",
    "move account transfer connect servic address move transfer",
]

RAW_COMMENTS = [
    "The bill payment was charged twice, the late fee is wrong!",
    "My payment for the bill: charged a late fee again.",
    "Billing invoice shows a fee charged after payment.",
    "Please transfer the service to my new address when I move.",
    "Service transfer to the new account never happened after the move.",
    "I asked to transfer service, the account at my new address is not connected.",
]


@pytest.fixture
def toy_documents():
    return pd.Series(BILLING + TRANSFER)


@pytest.fixture
def toy_dtm(toy_documents):
    return build_dtm(toy_documents, min_frequency=1)


@pytest.fixture
def gibbs():
    return GibbsSamplingLDA(alpha=0.1, beta=0.01)


@pytest.fixture
def toy_model(toy_dtm, gibbs):
    return gibbs.fit(toy_dtm.counts, 2, seed=42, iterations=200, terms=toy_dtm.terms)


@pytest.fixture
def stopword_file(tmp_path):
    path = tmp_path / "stopwords.txt"
    path.write_text("# english\nthe\na\n\nmy\nto\nis\nwas\nat\nfor\nnot\nI\nafter\nagain\nwhen\n",
                    encoding="utf-8")
    return str(path)


@pytest.fixture
def comments_csv(tmp_path):
    path = tmp_path / "comments.csv"
    pd.DataFrame({"id": range(len(RAW_COMMENTS)), "comments": RAW_COMMENTS}).to_csv(path, index=False)
    return str(path)
