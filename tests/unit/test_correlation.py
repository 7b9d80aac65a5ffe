"""tests for analysis id propagation"""

from concurrent.futures import ThreadPoolExecutor

from utils.correlation import AnalysisContext, bind_context, generate_analysis_id, get_analysis_id


def test_generate_analysis_id():
    first, second = generate_analysis_id(), generate_analysis_id()
    assert len(first) == 8
    assert first != second


def test_context_sets_and_restores():
    assert get_analysis_id() is None
    with AnalysisContext("outer001") as outer:
        assert outer == "outer001"
        with AnalysisContext("inner001"):
            assert get_analysis_id() == "inner001"
        assert get_analysis_id() == "outer001"
    assert get_analysis_id() is None


def test_bind_context_reaches_pool_threads():
    with AnalysisContext("pool0001"):
        with ThreadPoolExecutor(max_workers=2) as pool:
            bound = pool.submit(bind_context(get_analysis_id)).result()
    assert bound == "pool0001"
