from django.urls import path
from . import views

urlpatterns = [
    path('', views.home, name='home'),

    path('login/', views.login_view, name='login'),
    path('logout/', views.logout_view, name='logout'),

    path('phieu/luu/', views.luu_ten, name='luu_ten'),
    path('phieu/dieu_chinh/', views.dieu_chinh, name='dieu_chinh'),
    path('phieu/xoa/', views.xoa_ten, name='xoa_ten'),
    path('phieu/reset/', views.reset, name='reset'),
    path('phieu/goi_y/', views.goi_y, name='goi_y'),

    path('nhap_phieu/', views.nhap_phieu, name='nhap_phieu'),
    path('nhap_phieu/nguoi_nhap/', views.chon_nguoi_nhap, name='chon_nguoi_nhap'),
    path('nhap_phieu/loai_tru/', views.chon_loai_tru, name='chon_loai_tru'),
    path('nhap_phieu/luu/', views.luu_lan_nhap, name='luu_lan_nhap'),
    path('nhap_phieu/dieu_chinh/', views.dieu_chinh_tong_hop, name='dieu_chinh_tong_hop'),
    path('nhap_phieu/xoa/', views.xoa_ung_vien, name='xoa_ung_vien'),
    path('nhap_phieu/hoan_tac/', views.hoan_tac, name='hoan_tac'),
    path('nhap_phieu/tong_hop/', views.tong_hop, name='tong_hop'),

    path('permission_denied/', views.permission_denied, name='permission_denied'),
]
