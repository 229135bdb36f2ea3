from opct.tags import TOTAL_KEY, TestTags, calc_perc_str


def valid_tests(description):
    tests = []
    prefix = "tag"
    maximum = 5
    for i in range(1, maximum + 1):
        for _ in range(maximum - i, -1, -1):
            tests.append(f"[{prefix}-{i}] {description} ID {i}")
    return tests


def test_show_sorted_carried_case():
    tags = TestTags(valid_tests("TestShowSorted"))
    assert tags.show_sorted() == (
        "[total=15] [tag-1=5 (33.33%)] [tag-2=4 (26.67%)] "
        "[tag-3=3 (20.00%)] [tag-4=2 (13.33%)] [tag-5=1 (6.67%)]"
    )


def test_counts_per_tag():
    tags = TestTags(valid_tests("counts"))
    assert tags["tag-1"] == 5
    assert tags["tag-5"] == 1
    assert tags[TOTAL_KEY] == 15


def test_untagged_test_only_counts_total():
    tags = TestTags()
    tags.add("no tag here")
    assert dict(tags) == {TOTAL_KEY: 1}


def test_add_accumulates():
    tags = TestTags(["[sig-a] one"])
    tags.add("[sig-a] two")
    assert tags["sig-a"] == 2
    assert tags[TOTAL_KEY] == 2


def test_ranked_is_descending_and_total_first():
    ranked = TestTags(valid_tests("rank")).ranked()
    values = [value for _, value in ranked]
    assert values == sorted(values, reverse=True)
    assert ranked[0] == (TOTAL_KEY, 15)


def test_empty_show_sorted():
    assert TestTags().show_sorted() == "[total=0]"


def test_calc_perc_str():
    assert calc_perc_str(5, 15) == "5 (33.33%)"
    assert calc_perc_str(3, 15) == "3 (20.00%)"


def test_calc_perc_str_zero_denominator():
    assert calc_perc_str(0, 0) == "0 (NaN%)"