from Chunk_Index_rev.services.vector_store.errors import (
    CollectionAlreadyExistsError,
    RecommendationFailedError,
    VectorStoreError,
)
from Chunk_Index_rev.utils.errors import FoundationError, ProblemDetail


def test_problem_detail_to_response():
    problem = ProblemDetail(title="Error", status=400, detail="Bad")
    response = problem.to_response()
    assert response["title"] == "Error"
    assert "extra" not in response
    assert "instance" not in response


def test_foundation_error_wraps_problem():
    error = FoundationError("Oops", status=404)
    assert error.problem.status == 404
    assert error.message == "Oops"
    assert str(error) == "Oops"


def test_vector_store_errors_carry_problem_details():
    error = CollectionAlreadyExistsError("chunks")
    assert isinstance(error, VectorStoreError)
    response = error.problem.to_response()
    assert response["status"] == 409
    assert response["extra"] == {"collection": "chunks"}


def test_recommendation_failure_message():
    error = RecommendationFailedError()
    assert error.message == (
        "Failed to recommend points from qdrant. Your are likely providing an invalid point id."
    )
    assert error.problem.status == 400
