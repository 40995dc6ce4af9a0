"""
Classic MapReduce word count job.
The map phase emits (word, "1"); the reduce phase sums the counts of each word.
"""


def reduce_function(key, values):
    """
    Reduce function: sum all counts for a word.

    Args:
        key: Word
        values: List of counts as strings

    Returns:
        Total count as a string
    """
    return str(sum(int(v) for v in values))
