"""
Inverted index MapReduce job.
Maps each word to the documents it appears in.
"""


def reduce_function(key, values):
    """
    Reduce function: collect all document IDs for a word.

    Args:
        key: Word
        values: List of document IDs

    Returns:
        "<count> <comma-separated unique document IDs>"
    """
    # Remove duplicates and sort
    unique_docs = sorted(set(values))
    return f"{len(unique_docs)} {','.join(unique_docs)}"
