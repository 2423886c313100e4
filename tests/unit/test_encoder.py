"""Unit tests for the recursive encoder."""

from typing import Any

import pytest

from sd_jwt import (
    Disclosure,
    NestingTooDeep,
    ReservedKey,
    SDObjectDecoder,
    SDObjectEncoder,
    SeededRandomSource,
)


class FrontLoadingSource(SeededRandomSource):
    """Seeded source that always picks the first insertion position."""

    def randbelow(self, n: int) -> int:
        return 0


def _no_decoys(**kwargs: Any) -> SDObjectEncoder:
    return SDObjectEncoder(decoy_magnification_min=0, decoy_magnification_max=0, **kwargs)


class TestEncodeObjects:
    """Test encoding of JSON objects."""

    @pytest.mark.unit
    def test_single_claim_without_decoys(self) -> None:
        encoder = _no_decoys()
        encoded = encoder.encode({"key-1": "value-1"})

        assert list(encoded) == ["_sd"]
        assert len(encoded["_sd"]) == 1

        disclosures = encoder.disclosures
        assert len(disclosures) == 1
        assert disclosures[0].claim_name == "key-1"
        assert disclosures[0].claim_value == "value-1"
        assert encoded["_sd"][0] == disclosures[0].digest()

    @pytest.mark.unit
    def test_nested_objects_stay_visible(self) -> None:
        encoder = _no_decoys()
        encoded = encoder.encode({"address": {"country": "DE", "locality": "Schulpforta"}})

        assert "_sd" not in encoded
        assert set(encoded) == {"address"}
        assert len(encoded["address"]["_sd"]) == 2

    @pytest.mark.unit
    def test_retained_claims_are_kept_verbatim(self) -> None:
        cnf = {"jwk": {"kty": "EC", "crv": "P-256", "x": "x", "y": "y"}}
        encoder = _no_decoys()
        encoded = encoder.encode(
            {"iss": "https://issuer.example.com", "iat": 1683000000, "cnf": cnf, "sub": "user_42"}
        )

        assert encoded["iss"] == "https://issuer.example.com"
        assert encoded["iat"] == 1683000000
        assert encoded["cnf"] == cnf
        assert "sub" not in encoded
        assert [d.claim_name for d in encoder.disclosures] == ["sub"]

    @pytest.mark.unit
    def test_retained_claims_only_apply_at_top_level(self) -> None:
        encoder = _no_decoys()
        encoded = encoder.encode({"nested": {"iss": "hidden"}})

        assert "iss" not in encoded["nested"]
        assert encoder.disclosures[0].claim_name == "iss"

    @pytest.mark.unit
    def test_custom_retained_claims(self) -> None:
        encoder = _no_decoys(retained_claims={"sub"})
        encoded = encoder.encode({"iss": "https://issuer.example.com", "sub": "user_42"})

        assert encoded["sub"] == "user_42"
        assert "iss" not in encoded

    @pytest.mark.unit
    def test_include_hash_algorithm(self) -> None:
        encoder = _no_decoys(hash_alg="sha-512", include_hash_algorithm=True)
        encoded = encoder.encode({"a": 1, "b": {"c": 2}})

        assert encoded["_sd_alg"] == "sha-512"
        assert "_sd_alg" not in encoded["b"]
        assert encoded["_sd"] == [encoder.disclosures[0].digest("sha-512")]

    @pytest.mark.unit
    def test_hash_algorithm_is_omitted_by_default(self) -> None:
        assert "_sd_alg" not in _no_decoys().encode({"a": 1})

    @pytest.mark.unit
    def test_disclosures_are_depth_first(self) -> None:
        encoder = _no_decoys()
        encoder.encode({"a": 1, "b": {"c": 2, "d": [3]}, "e": 4})

        assert [(d.claim_name, d.claim_value) for d in encoder.disclosures] == [
            ("a", 1),
            ("c", 2),
            (None, 3),
            ("e", 4),
        ]

    @pytest.mark.unit
    def test_disclosures_reset_between_calls(self) -> None:
        encoder = _no_decoys()
        encoder.encode({"a": 1, "b": 2})
        encoder.encode({"c": 3})

        assert [d.claim_name for d in encoder.disclosures] == ["c"]

    @pytest.mark.unit
    def test_reserved_claim_names(self) -> None:
        with pytest.raises(ReservedKey):
            _no_decoys().encode({"_sd": "value"})
        with pytest.raises(ReservedKey):
            _no_decoys().encode({"outer": {"...": {"x": 1}}})

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "cnf",
        [
            {"_sd": ["digest"]},
            {"jwk": {"...": "digest"}},
            {"keys": [{"kty": "EC", "_sd_alg": "sha-256"}]},
            {"jwk": {"_sd_jwt": "a.b.c"}},
        ],
    )
    def test_reserved_keys_inside_retained_claims(self, cnf: dict[str, Any]) -> None:
        with pytest.raises(ReservedKey):
            _no_decoys().encode({"iss": "https://issuer.example.com", "cnf": cnf})

    @pytest.mark.unit
    def test_reserved_strings_as_retained_values_are_allowed(self) -> None:
        encoded = _no_decoys().encode({"cnf": {"kid": "_sd", "tags": ["..."]}})
        assert encoded["cnf"] == {"kid": "_sd", "tags": ["..."]}


class TestEncodeArrays:
    """Test encoding of JSON arrays."""

    @pytest.mark.unit
    def test_scalar_elements_become_markers(self) -> None:
        encoder = _no_decoys()
        encoded = encoder.encode(["e1", "e2"])

        d1, d2 = encoder.disclosures
        assert d1.claim_name is None and d1.claim_value == "e1"
        assert d2.claim_name is None and d2.claim_value == "e2"
        assert encoded == [{"...": d1.digest()}, {"...": d2.digest()}]

    @pytest.mark.unit
    def test_composite_elements_are_encoded_in_place(self) -> None:
        encoder = _no_decoys()
        encoded = encoder.encode([{"a": 1}, ["b"]])

        assert list(encoded[0]) == ["_sd"]
        assert list(encoded[1][0]) == ["..."]

    @pytest.mark.unit
    def test_decoys_are_inserted_at_random_positions(self) -> None:
        encoder = SDObjectEncoder(
            decoy_magnification_min=1,
            decoy_magnification_max=1,
            random_source=FrontLoadingSource(),
        )
        encoded = encoder.encode(["e1", "e2"])
        real = [d.digest() for d in encoder.disclosures]

        assert len(encoded) == 4
        assert [element["..."] for element in encoded[2:]] == real
        assert all(element["..."] not in real for element in encoded[:2])


class TestDecoys:
    """Test decoy count and configuration."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "ratio,size,expected",
        [(0.0, 4, 0), (1.0, 4, 4), (0.5, 1, 1), (0.5, 3, 2), (2.0, 3, 6), (0.25, 1, 0)],
    )
    def test_object_decoy_count(self, ratio: float, size: int, expected: int) -> None:
        encoder = SDObjectEncoder(decoy_magnification_min=ratio, decoy_magnification_max=ratio)
        encoded = encoder.encode({f"claim{i}": i for i in range(size)})

        assert len(encoded["_sd"]) == size + expected

    @pytest.mark.unit
    def test_decoy_count_within_range(self) -> None:
        encoder = SDObjectEncoder(random_source=SeededRandomSource(3))
        for _ in range(20):
            encoded = encoder.encode({f"claim{i}": i for i in range(10)})
            # 10 claims, 5 to 15 decoys
            assert 15 <= len(encoded["_sd"]) <= 25

    @pytest.mark.unit
    def test_digest_list_is_sorted(self) -> None:
        encoded = SDObjectEncoder().encode({f"claim{i}": i for i in range(10)})
        assert encoded["_sd"] == sorted(encoded["_sd"])

    @pytest.mark.unit
    def test_magnification_is_clamped(self) -> None:
        encoder = SDObjectEncoder().set_decoy_magnification(-1, 20)
        assert encoder.decoy_magnification_min == 0
        assert encoder.decoy_magnification_max == 10

    @pytest.mark.unit
    def test_inverted_range_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            SDObjectEncoder(decoy_magnification_min=2, decoy_magnification_max=1)

    @pytest.mark.unit
    def test_seeded_encodings_are_reproducible(self, sample_claims: dict[str, Any]) -> None:
        first = SDObjectEncoder(random_source=SeededRandomSource(5)).encode(sample_claims)
        second = SDObjectEncoder(random_source=SeededRandomSource(5)).encode(sample_claims)
        assert first == second


class TestEncodeDecodeRoundTrip:
    """Decoding with every disclosure restores the original document."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "document",
        [
            {},
            [],
            {"a": None, "b": True, "c": 1.5, "d": "Möbius"},
            {"a": {"b": {"c": [1, [2, {"d": 3}], {}]}}},
            [[["deep"]], {"k": []}, None, False],
        ],
    )
    def test_round_trip(self, document: Any) -> None:
        encoder = SDObjectEncoder()
        encoded = encoder.encode(document)

        assert SDObjectDecoder().decode(encoded, encoder.disclosures) == document

    @pytest.mark.unit
    def test_round_trip_with_sha512(self, sample_claims: dict[str, Any]) -> None:
        encoder = SDObjectEncoder(hash_alg="sha-512", include_hash_algorithm=True)
        encoded = encoder.encode(sample_claims)

        assert SDObjectDecoder().decode(encoded, encoder.disclosures) == sample_claims

    @pytest.mark.unit
    def test_disclosures_match_reparsed_wire_form(self, sample_claims: dict[str, Any]) -> None:
        encoder = SDObjectEncoder()
        encoded = encoder.encode(sample_claims)
        reparsed = [Disclosure.parse(d.wire_form) for d in encoder.disclosures]

        assert SDObjectDecoder().decode(encoded, reparsed) == sample_claims


class TestEncoderLimits:
    """Test input validation of the encoder."""

    @pytest.mark.unit
    def test_scalar_root_is_rejected(self) -> None:
        with pytest.raises(TypeError):
            SDObjectEncoder().encode("not a document")  # type: ignore[arg-type]

    @pytest.mark.unit
    def test_nesting_limit(self) -> None:
        document: dict[str, Any] = {"leaf": 1}
        for _ in range(5):
            document = {"n": document}

        SDObjectEncoder(max_depth=5).encode(document)
        with pytest.raises(NestingTooDeep):
            SDObjectEncoder(max_depth=4).encode(document)

    @pytest.mark.unit
    def test_default_nesting_limit(self) -> None:
        document: list[Any] = ["leaf"]
        for _ in range(150):
            document = [document]

        with pytest.raises(NestingTooDeep):
            SDObjectEncoder().encode(document)

    @pytest.mark.unit
    def test_nesting_limit_inside_retained_claims(self) -> None:
        cnf: dict[str, Any] = {"leaf": 1}
        for _ in range(150):
            cnf = {"n": cnf}

        with pytest.raises(NestingTooDeep):
            SDObjectEncoder().encode({"cnf": cnf})
