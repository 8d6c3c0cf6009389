import pytest

from poster_scanner import ImageBounds, TextDetection, TitleResolver
from tests.conftest import make_detection, make_group, make_metrics


class TestResolveTitle:
    def test_two_line_title_with_noise(self, resolver: TitleResolver, until_dawn_poster) -> None:
        assert resolver.resolve_title(until_dawn_poster) == "UNTIL DAWN"

    def test_function_key_is_filtered_before_grouping(self, resolver: TitleResolver) -> None:
        detections = [
            make_detection("UNTIL", 300, 100, 700, 200),
            make_detection("DAWN", 350, 220, 650, 300),
            make_detection("F5", 900, 950, 930, 980),
        ]

        title = resolver.resolve_title(detections)

        assert title == "UNTIL DAWN"
        assert "F5" not in title

    def test_lines_merged_across_groups(self, resolver: TitleResolver) -> None:
        detections = [
            make_detection("THE", 440, 90, 560, 110),
            make_detection("MATRIX", 380, 131, 620, 161),
        ]
        assert resolver.resolve_title(detections) == "THE MATRIX"

    def test_title_containing_modifier_word(self, resolver: TitleResolver) -> None:
        detections = [
            make_detection("THE NIGHT SHIFT", 200, 150, 600, 250),
            make_detection("Directed by Jane Doe", 250, 900, 550, 930),
        ]
        assert resolver.resolve_title(detections) == "THE NIGHT SHIFT"

    def test_three_letter_title_words(self, resolver: TitleResolver) -> None:
        detections = [
            make_detection("ICE", 250, 150, 550, 250),
            make_detection("AGE", 250, 270, 550, 350),
            make_detection("Directed by Chris Wedge", 250, 900, 550, 930),
        ]
        assert resolver.resolve_title(detections) == "ICE AGE"

    def test_single_detection(self, resolver: TitleResolver) -> None:
        assert resolver.resolve_title([make_detection("Parasite", 100, 100, 400, 160)]) == "PARASITE"

    def test_empty_input(self, resolver: TitleResolver) -> None:
        assert resolver.resolve_title([]) is None

    def test_everything_filtered(self, resolver: TitleResolver) -> None:
        detections = [
            make_detection("F5", 0, 0, 30, 30),
            make_detection("IMG_0042.jpg", 0, 40, 100, 60),
            make_detection("2024", 0, 70, 40, 90),
        ]
        assert resolver.resolve_title(detections) is None

    def test_malformed_detections_are_skipped(self, resolver: TitleResolver) -> None:
        detections = [
            TextDetection(text = "NOISE", quad = ((0.0, 0.0), (5.0, 5.0))),
            make_detection("ARRIVAL", 100, 100, 400, 160),
        ]
        assert resolver.resolve_title(detections) == "ARRIVAL"

    def test_only_malformed_detections(self, resolver: TitleResolver) -> None:
        detections = [TextDetection(text = "ARRIVAL", quad = ((0.0, 0.0), (5.0, 5.0)))]
        assert resolver.resolve_title(detections) is None

    def test_deterministic(self, resolver: TitleResolver, until_dawn_poster) -> None:
        assert resolver.resolve_title(until_dawn_poster) == resolver.resolve_title(list(until_dawn_poster))

    def test_title_case_output(self) -> None:
        resolver   = TitleResolver(config_override = {"cleanup": {"output_case": "title"}})
        detections = [
            make_detection("THE", 440, 90, 560, 110),
            make_detection("MATRIX", 380, 131, 620, 161),
        ]
        assert resolver.resolve_title(detections) == "The Matrix"

    def test_unknown_output_case(self) -> None:
        with pytest.raises(ValueError):
            TitleResolver(config_override = {"cleanup": {"output_case": "shouting"}})


class TestGroupLines:
    def test_groups_by_vertical_gap(self, resolver: TitleResolver) -> None:
        detections = [
            make_detection("credits text", 100, 800, 400, 820),
            make_detection("STAR", 100, 100, 300, 150),
            make_detection("WARS", 320, 105, 520, 145),
        ]
        image_bounds = ImageBounds.from_detections(detections)
        blocks       = resolver.score_blocks(detections, image_bounds)

        groups = resolver.group_lines(blocks)

        assert [group.text for group in groups] == ["STAR WARS", "credits text"]
        assert groups[0].score == pytest.approx(blocks[1].score + blocks[2].score)
        assert groups[0].bounds == ImageBounds(100, 100, 520, 150)

    def test_every_block_lands_in_one_group(self, resolver: TitleResolver, until_dawn_poster) -> None:
        detections   = resolver.block_filter.filter_detections(until_dawn_poster)
        image_bounds = ImageBounds.from_detections(detections)
        blocks       = resolver.score_blocks(detections, image_bounds)

        groups = resolver.group_lines(blocks)

        assert sum(len(group.blocks) for group in groups) == len(blocks)


class TestBlockScoring:
    """
    Baseline block: bottom edge, centred, no area, optimal aspect ratio, no
    neighbours, one all-letter word. It scores 20 (centering) + 15 (aspect)
    + 15 (short phrase) + 10 (letter ratio) = 60.
    """

    def score(self, resolver: TitleResolver, text: str = "HEAT", neighbours: tuple[float, ...] = (), **fields) -> float:
        metrics = make_metrics(**fields)
        others  = [make_metrics(center_y = center_y) for center_y in neighbours]
        return resolver.score_block(text, metrics, [metrics] + others)

    def test_baseline(self, resolver: TitleResolver) -> None:
        assert self.score(resolver) == pytest.approx(60.0)

    @pytest.mark.parametrize("relative_y, expected", [
        (0.2, 60.0 + 32.0 + 30.0),
        (0.4, 60.0 + 24.0 + 15.0),
        (0.75, 60.0 + 10.0),
    ])
    def test_vertical_position(self, resolver: TitleResolver, relative_y: float, expected: float) -> None:
        assert self.score(resolver, relative_y = relative_y) == pytest.approx(expected)

    @pytest.mark.parametrize("relative_x, expected", [
        (0.0, 50.0),
        (0.75, 55.0),
        (1.2, 46.0),
    ])
    def test_horizontal_centering(self, resolver: TitleResolver, relative_x: float, expected: float) -> None:
        assert self.score(resolver, relative_x = relative_x) == pytest.approx(expected)

    @pytest.mark.parametrize("relative_area, expected", [
        (0.05, 90.0),
        (0.025, 75.0),
        (0.07, 78.0),
        (0.5, 60.0),
    ])
    def test_size_optimum(self, resolver: TitleResolver, relative_area: float, expected: float) -> None:
        assert self.score(resolver, relative_area = relative_area) == pytest.approx(expected)

    @pytest.mark.parametrize("aspect_ratio, expected", [
        (5.0, 54.0),
        (1.0, 54.0),
        (8.0, 45.0),
        (20.0, 45.0),
    ])
    def test_aspect_optimum_and_cap(self, resolver: TitleResolver, aspect_ratio: float, expected: float) -> None:
        assert self.score(resolver, aspect_ratio = aspect_ratio) == pytest.approx(expected)

    def test_proximity_band(self, resolver: TitleResolver) -> None:
        score = self.score(resolver, center_y = 100.0, neighbours = [105.0, 90.0, 110.5, 300.0])
        assert score == pytest.approx(70.0)

    @pytest.mark.parametrize("text, expected", [
        ("ONE TWO THREE FOUR", 35.0 + 15.0 + 10.0 * 15 / 18),
        ("ONE TWO THREE FOUR FIVE", 35.0 + 8.0 + 10.0 * 19 / 23),
        ("ONE TWO THREE FOUR FIVE SIX", 35.0 + 8.0 + 10.0 * 22 / 27),
        ("ONE TWO THREE FOUR FIVE SIX SEVEN", 35.0 + 10.0 * 27 / 33),
        ("", 35.0),
    ])
    def test_word_count_bonus(self, resolver: TitleResolver, text: str, expected: float) -> None:
        assert self.score(resolver, text = text) == pytest.approx(expected)

    def test_letter_ratio(self, resolver: TitleResolver) -> None:
        assert self.score(resolver, text = "R2D2") == pytest.approx(55.0)

    def test_keyboard_penalty(self, resolver: TitleResolver) -> None:
        assert self.score(resolver, text = "CTRL SHIFT") == pytest.approx(35.0 + 15.0 + 9.0 - 50.0)

    def test_single_modifier_word_is_not_penalized(self, resolver: TitleResolver) -> None:
        assert self.score(resolver, text = "NIGHT SHIFT") == pytest.approx(35.0 + 15.0 + 10.0 * 10 / 11)

    def test_keyboard_like_text_is_penalized(self, resolver: TitleResolver) -> None:
        detections   = [make_detection("CTRL SHIFT", 100, 100, 400, 200), make_detection("HEAT", 100, 300, 400, 400)]
        image_bounds = ImageBounds.from_detections(detections)
        blocks       = resolver.score_blocks(detections, image_bounds)

        plain_score = resolver.score_block("CURL SWIFT", blocks[0].metrics, [block.metrics for block in blocks])

        assert plain_score - blocks[0].score == pytest.approx(resolver.config.block_scoring.keyboard_penalty)

    def test_higher_blocks_score_higher(self, resolver: TitleResolver) -> None:
        detections   = [make_detection("HEAT", 100, 100, 400, 200), make_detection("HEAT", 100, 700, 400, 800)]
        image_bounds = ImageBounds.from_detections(detections)
        top, bottom  = resolver.score_blocks(detections, image_bounds)

        assert top.score > bottom.score


class TestMergeGroups:
    def test_uppercase_groups_merge(self, resolver: TitleResolver) -> None:
        groups = [make_group("THE", 440, 90, 560, 110), make_group("MATRIX", 380, 131, 620, 161)]

        merged = resolver.merge_groups(groups)

        assert len(merged) == 1
        assert merged[0].text == "THE MATRIX"
        assert merged[0].score == pytest.approx(2.0)
        assert merged[0].bounds == ImageBounds(380, 90, 620, 161)

    def test_merge_after_colon(self, resolver: TitleResolver) -> None:
        groups = [make_group("Star Wars:", 100, 100, 300, 120), make_group("A New Hope", 100, 135, 300, 155)]
        assert [group.text for group in resolver.merge_groups(groups)] == ["Star Wars: A New Hope"]

    def test_merge_after_article(self, resolver: TitleResolver) -> None:
        groups = [make_group("The", 150, 100, 250, 120), make_group("GODFATHER", 100, 135, 300, 155)]
        assert [group.text for group in resolver.merge_groups(groups)] == ["The GODFATHER"]

    def test_mixed_case_groups_stay_apart(self, resolver: TitleResolver) -> None:
        groups = [make_group("hello", 100, 100, 300, 120), make_group("world", 100, 135, 300, 155)]
        assert len(resolver.merge_groups(groups)) == 2

    def test_misaligned_groups_stay_apart(self, resolver: TitleResolver) -> None:
        groups = [make_group("STAR", 100, 100, 300, 120), make_group("WARS", 500, 135, 700, 155)]
        assert len(resolver.merge_groups(groups)) == 2

    def test_vertical_gap_is_capped(self, resolver: TitleResolver) -> None:
        groups = [make_group("STAR", 100, 0, 300, 100), make_group("WARS", 100, 60, 300, 160)]
        assert len(resolver.merge_groups(groups)) == 2

    def test_keyboard_groups_do_not_merge_as_uppercase(self, resolver: TitleResolver) -> None:
        groups = [make_group("CTRL", 100, 100, 300, 120), make_group("DAWN", 100, 135, 300, 155)]
        assert len(resolver.merge_groups(groups)) == 2

    def test_merging_terminates_in_scan_order(self, resolver: TitleResolver) -> None:
        words  = ["ONE", "TWO", "THREE", "FOUR", "FIVE"]
        groups = [make_group(word, 100, 100 + 30 * i, 300, 120 + 30 * i) for i, word in enumerate(words)]

        merged = resolver.merge_groups(groups)

        assert [group.text for group in merged] == ["ONE TWO THREE", "FOUR FIVE"]

    def test_disabled_rules(self) -> None:
        resolver = TitleResolver(config_override = {"merging": {"merge_uppercase": False, "merge_after_article": False}})
        groups   = [make_group("THE", 440, 90, 560, 110), make_group("MATRIX", 380, 131, 620, 161)]

        assert len(resolver.merge_groups(groups)) == 2


class TestScoreGroup:
    def test_all_multipliers(self, resolver: TitleResolver) -> None:
        group = make_group("THE MATRIX", 40, 10, 60, 20, score = 10.0)
        assert resolver.score_group(group, ImageBounds(0, 0, 100, 100)) == pytest.approx(1663.2)

    def test_lowercase_phrase_near_bottom(self, resolver: TitleResolver) -> None:
        group = make_group("a quiet place", 0, 80, 20, 90, score = 10.0)
        assert resolver.score_group(group, ImageBounds(0, 0, 100, 100)) == pytest.approx(28.0)

    def test_upper_half_multiplier(self, resolver: TitleResolver) -> None:
        group = make_group("heat wave", 0, 45, 20, 55, score = 10.0)
        assert resolver.score_group(group, ImageBounds(0, 0, 100, 100)) == pytest.approx(75.0)

    def test_keyboard_group_is_suppressed(self, resolver: TitleResolver) -> None:
        group = make_group("CTRL ALT", 40, 10, 60, 20, score = 100.0)
        assert resolver.score_group(group, ImageBounds(0, 0, 100, 100)) == pytest.approx(1.0)

    def test_first_group_wins_ties(self, resolver: TitleResolver) -> None:
        groups = [make_group("ALPHA BETA", 40, 10, 60, 20), make_group("GAMMA DELTA", 40, 10, 60, 20)]
        assert resolver.select_best_group(groups, ImageBounds(0, 0, 100, 100)).text == "ALPHA BETA"


class TestCleanTitle:
    @pytest.mark.parametrize("text, title", [
        ("OFFICIAL POSTER: DUNE", "DUNE"),
        ("The Poster Jaws", "JAWS"),
        ("Dune Movie", "DUNE"),
        ("Spider-Man: No Way Home!!", "SPIDER-MAN: NO WAY HOME"),
        ("Alien   :   Romulus", "ALIEN: ROMULUS"),
        ("Heat (1995)", "HEAT 1995"),
        ("Wicked in theaters", "WICKED"),
    ])
    def test_cleanup(self, resolver: TitleResolver, text: str, title: str) -> None:
        assert resolver.clean_title(text) == title

    def test_only_boilerplate(self, resolver: TitleResolver) -> None:
        assert resolver.clean_title("Coming Soon") is None
        assert resolver.clean_title("***") is None

    def test_preserve_case(self) -> None:
        resolver = TitleResolver(config_override = {"cleanup": {"output_case": "preserve"}})
        assert resolver.clean_title("Alien: Romulus Trailer") == "Alien: Romulus"
