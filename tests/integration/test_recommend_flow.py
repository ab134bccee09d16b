"""Integration tests for the recommendation flow."""
import json
import pytest
import pandas as pd
from contextlib import contextmanager

from content_optimizer.config import settings
from content_optimizer.db import db
from content_optimizer.db.models import OptimizationRun, OptimizationTrial
from content_optimizer.main import main
from content_optimizer.optimize.optimizer import InvalidBaseConfiguration
from content_optimizer.orchestrator import Orchestrator


def test_full_recommendation_flow(registry, base_configuration, weights, session_factory, test_db):
    """Recommend, persist and read back an optimization run."""
    orchestrator = Orchestrator(registry, session_factory=session_factory)

    result = orchestrator.recommend(
        segment='gen_z',
        base_configuration=base_configuration,
        dimensions=['cta_type', 'num_hashtags', 'content_type'],
        weights=weights,
        save_to_db=True
    )

    best = result['best_configuration']
    assert best['cta_type'] == 'shop_now'
    assert best['num_hashtags'] == 6
    assert best['content_type'] == 'video'
    assert best['tone'] == base_configuration['tone']

    assert result['baseline_score'] == pytest.approx(0.0377)
    assert result['best_score'] == pytest.approx(0.0652)
    assert result['improvement'] == pytest.approx(0.0652 - 0.0377)
    assert result['best_scores']['engagement_rate'] == pytest.approx(0.104)

    # Persisted run and trials
    run = test_db.query(OptimizationRun).filter_by(id=result['run_id']).one()
    assert run.segment == 'gen_z'
    assert run.best_configuration == best
    assert run.dimensions == ['cta_type', 'num_hashtags', 'content_type']
    assert run.best_score == pytest.approx(0.0652)

    trials = test_db.query(OptimizationTrial).filter_by(optimization_id=run.id).all()
    assert len(trials) == 1 + 4 + 7 + 4
    accepted = sorted((t.trial_number, t.candidate_value) for t in trials if t.accepted and t.dimension)
    assert [value for _, value in accepted] == ['shop_now', 4, 5, 6, 'video']


def test_recommend_uses_default_weights(registry, base_configuration):
    orchestrator = Orchestrator(registry)

    result = orchestrator.recommend('gen_z', base_configuration, ['cta_type'])

    assert result['best_configuration']['cta_type'] == 'shop_now'
    assert result['run_id'] is None


def test_recommend_unknown_segment(registry, base_configuration):
    with pytest.raises(LookupError):
        Orchestrator(registry).recommend('gen_alpha', base_configuration, ['cta_type'])


def test_recommend_malformed_base(registry, base_configuration):
    """A base missing a model feature cannot be optimized."""
    base = dict(base_configuration)
    del base['post_hour']

    with pytest.raises(InvalidBaseConfiguration):
        Orchestrator(registry).recommend('gen_z', base, ['cta_type'])


def test_persistence_failure_is_not_fatal(registry, base_configuration):
    @contextmanager
    def broken_session():
        raise RuntimeError('database is locked')
        yield

    orchestrator = Orchestrator(registry, session_factory=broken_session)

    result = orchestrator.recommend('gen_z', base_configuration, ['cta_type'], save_to_db=True)

    assert result['run_id'] is None
    assert result['best_configuration']['cta_type'] == 'shop_now'


def test_variants(registry, base_configuration, weights):
    orchestrator = Orchestrator(registry)

    variants = orchestrator.variants('boomer', base_configuration, 'caption_length', count=2, weights=weights)

    assert isinstance(variants, pd.DataFrame)
    assert list(variants['caption_length']) == ['medium', 'short', 'long']
    assert list(variants['score']) == pytest.approx([0.015, 0.015, 0.02])
    assert variants['engagement_rate'].iloc[2] == pytest.approx(0.04)
    assert variants['configuration'].iloc[0] == base_configuration


def test_cli_recommend(tmp_path, monkeypatch, model_table, base_configuration, weights, reset_engine):
    monkeypatch.chdir(tmp_path)
    (tmp_path / 'models.json').write_text(json.dumps(model_table))
    (tmp_path / 'base.json').write_text(json.dumps(base_configuration))
    (tmp_path / 'weights.json').write_text(json.dumps(weights))

    result = main([
        '--database_url', f"sqlite:///{tmp_path / 'runs.db'}",
        'recommend',
        '--segment', 'gen_z',
        '--models', 'models.json',
        '--base', 'base.json',
        '--weights', 'weights.json',
        '--dimensions', 'cta_type', 'font_family',
        '--save'
    ])

    assert result['best_configuration']['cta_type'] == 'shop_now'
    assert result['skipped_dimensions'] == ['font_family']
    assert result['run_id'] is not None


def test_cli_variants(tmp_path, monkeypatch, model_table, base_configuration):
    monkeypatch.chdir(tmp_path)
    (tmp_path / 'models.json').write_text(json.dumps(model_table))
    (tmp_path / 'base.json').write_text(json.dumps(base_configuration))

    variants = main([
        'variants',
        '--segment', 'gen_z',
        '--models', 'models.json',
        '--base', 'base.json',
        '--dimension', 'num_hashtags',
        '--count', '2'
    ])

    assert list(variants['num_hashtags']) == [3, 0, 1]


def test_cli_missing_file_exits(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SystemExit) as exc_info:
        main([
            'recommend',
            '--segment', 'gen_z',
            '--models', 'missing.json',
            '--base', 'base.json',
            '--dimensions', 'cta_type'
        ])

    assert exc_info.value.code == 1


def test_configure_rebinds_to_settings_url(tmp_path, reset_engine):
    """After pointing the engine at a throwaway database, configure() restores the default."""
    db.configure(f"sqlite:///{tmp_path / 'other.db'}")
    assert str(tmp_path) in str(db.get_engine().url)

    db.configure()

    assert db.get_engine().url.render_as_string(hide_password=False) == settings.database_url


@pytest.mark.parametrize('dimension', ['score', 'variant', 'configuration', 'engagement_rate'])
def test_variants_rejects_colliding_dimension(registry, base_configuration, dimension):
    """A dimension named like a result column would be overwritten."""
    domain = {dimension: ['a', 'b']}
    orchestrator = Orchestrator(registry, domain=domain)

    with pytest.raises(ValueError):
        orchestrator.variants('boomer', dict(base_configuration, **{dimension: 'a'}), dimension, count=1)
