from ratings import average_rating, top_rated, with_average


def college(name, *ratings):
    return {"name": name, "reviews": [{"rating": r} for r in ratings]}


def test_average_is_arithmetic_mean():
    assert average_rating([{"rating": 4}, {"rating": 5}, {"rating": 3}]) == 4.0
    assert average_rating([{"rating": 4.5}, {"rating": 3}]) == 3.75


def test_average_without_reviews_is_zero():
    assert average_rating([]) == 0.0
    assert average_rating(None) == 0.0
    assert with_average({"name": "Empty"})["average_rating"] == 0.0


def test_with_average_does_not_mutate_input():
    c = college("A", 5, 4)
    out = with_average(c)
    assert out["average_rating"] == 4.5
    assert "average_rating" not in c


def test_top_rated_orders_descending_and_limits():
    colleges = [college("A", 3), college("B", 5), college("C", 4, 5), college("D", 1)]
    assert [c["name"] for c in top_rated(colleges)] == ["B", "C", "A"]


def test_top_rated_ties_keep_store_order():
    colleges = [college("A", 4), college("B", 5), college("C", 4), college("D", 4)]
    assert [c["name"] for c in top_rated(colleges)] == ["B", "A", "C"]


def test_top_rated_with_fewer_colleges():
    colleges = [college("A"), college("B", 2)]
    ranked = top_rated(colleges)
    assert [c["name"] for c in ranked] == ["B", "A"]
    assert ranked[1]["average_rating"] == 0.0
