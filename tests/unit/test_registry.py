"""Unit tests for the model registry."""
import json
import pytest

from content_optimizer.core.result import Ok, ErrorReason
from content_optimizer.scoring.linear import LinearObjectiveModel
from content_optimizer.scoring.registry import ModelRegistry, SegmentModels
from content_optimizer.scoring.scorer import ModelScorer


def test_registry_segments(registry):
    assert registry.segments == ('gen_z', 'boomer')
    assert len(registry) == 2
    assert 'gen_z' in registry


def test_required_fields_default_to_model_features(registry):
    """Without an explicit list, every field the models read is required."""
    assert registry['gen_z'].required_fields == ('content_type', 'num_hashtags', 'cta_type', 'post_hour')
    assert registry['boomer'].required_fields == ('cta_type', 'caption_length')


def test_lookup(registry):
    found = registry.lookup('gen_z')
    assert isinstance(found, Ok)
    assert found.value.objectives == ('engagement_rate', 'click_through_rate', 'conversion_rate')

    missing = registry.lookup('gen_alpha')
    assert missing.reason is ErrorReason.NO_MODEL


def test_segment_scorer(registry, base_configuration):
    scorer = registry['gen_z'].scorer()

    assert isinstance(scorer, ModelScorer)
    # 0.01 + learn_more 0.005 + 12 * 0.0005
    assert scorer.predict(base_configuration, 'click_through_rate').value == pytest.approx(0.021)


def test_registry_is_read_only(registry):
    with pytest.raises(TypeError):
        registry['gen_z'].models['engagement_rate'] = None

    with pytest.raises(TypeError):
        registry['gen_alpha'] = registry['gen_z']


def test_segment_key_must_match():
    models = SegmentModels(segment='gen_z', models={'engagement_rate': LinearObjectiveModel()})

    with pytest.raises(ValueError):
        ModelRegistry({'millennial': models})


def test_missing_objectives_table():
    with pytest.raises(ValueError):
        ModelRegistry.from_dict({'gen_z': {'required_fields': []}})


def test_load_json(tmp_path, model_table):
    path = tmp_path / 'models.json'
    path.write_text(json.dumps(model_table))

    registry = ModelRegistry.load_json(path)

    assert registry.segments == ('gen_z', 'boomer')
    assert registry.to_dict()['boomer'] == model_table['boomer']
