"""Errors raised by the pipeline stages. Every one of them aborts the run."""

class TopicPipelineError(Exception):
    """Base class for all pipeline failures."""

class ResourceNotFound(TopicPipelineError):
    """Input file or stopword list is missing, unreachable or malformed."""

class EmptyVocabulary(TopicPipelineError):
    """Frequency pruning removed every term."""

class EmptyCorpusAfterPruning(TopicPipelineError):
    """Every document was reduced to an all-zero term vector."""

class FitError(TopicPipelineError):
    """A degenerate matrix was passed to a topic model fitter."""

class InvalidTopicCount(TopicPipelineError):
    """Topic count is not positive or exceeds the vocabulary size."""
