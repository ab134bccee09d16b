"""Pytest configuration and fixtures."""
import pytest
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from content_optimizer.db.db import configure
from content_optimizer.db.models import Base
from content_optimizer.scoring.registry import ModelRegistry


@pytest.fixture
def base_configuration():
    """Baseline content configuration."""
    return {
        'content_type': 'image',
        'cta_type': 'learn_more',
        'num_hashtags': 3,
        'post_hour': 12,
        'caption_length': 'medium',
        'tone': 'informative'
    }


@pytest.fixture
def weights():
    """Objective weights."""
    return {
        'engagement_rate': 0.5,
        'click_through_rate': 0.3,
        'conversion_rate': 0.2
    }


@pytest.fixture
def model_table():
    """Coefficient table for two audience segments."""
    return {
        'gen_z': {
            'objectives': {
                'engagement_rate': {
                    'intercept': 0.05,
                    'coefficients': {
                        'content_type=video': 0.03,
                        'content_type=carousel': 0.02,
                        'num_hashtags': 0.004,
                        'cta_type=follow': 0.01
                    }
                },
                'click_through_rate': {
                    'intercept': 0.01,
                    'coefficients': {
                        'cta_type=shop_now': 0.02,
                        'cta_type=learn_more': 0.005,
                        'post_hour': 0.0005
                    }
                },
                'conversion_rate': {
                    'intercept': 0.002,
                    'coefficients': {
                        'cta_type=shop_now': 0.01,
                        'cta_type=sign_up': 0.006
                    }
                }
            }
        },
        'boomer': {
            'required_fields': ['cta_type', 'caption_length'],
            'objectives': {
                'engagement_rate': {
                    'intercept': 0.03,
                    'coefficients': {
                        'caption_length=long': 0.01
                    }
                }
            }
        }
    }


@pytest.fixture
def registry(model_table):
    """Model registry built from the coefficient table."""
    return ModelRegistry.from_dict(model_table)


@pytest.fixture
def test_db():
    """Create in-memory SQLite database for testing."""
    engine = create_engine('sqlite:///:memory:')
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    yield session

    session.close()


@pytest.fixture
def session_factory(test_db):
    """Session context manager bound to the in-memory database."""
    @contextmanager
    def factory():
        yield test_db
        test_db.commit()

    return factory


@pytest.fixture
def reset_engine():
    """Rebind the module engine to the settings URL after a test reconfigures it."""
    yield

    configure()
