import pytest
from django.core.cache import cache

from quan_ly_phieu_bau.models import Candidate


@pytest.fixture(autouse=True)
def xoa_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def nguoi_nhap(django_user_model):
    return django_user_model.objects.create_user(username='nhap1', password='matkhau123', last_name='Người nhập 1')


@pytest.fixture
def nguoi_nhap_2(django_user_model):
    return django_user_model.objects.create_user(username='nhap2', password='matkhau123')


@pytest.fixture
def ung_vien(db):
    return [Candidate.objects.create(name=name) for name in ['A', 'B', 'C']]


@pytest.fixture
def client_dang_nhap(client, nguoi_nhap):
    client.force_login(nguoi_nhap)
    return client
