# Nạp danh sách ứng cử viên từ file văn bản, mỗi dòng một tên
import os

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from quan_ly_phieu_bau.models import Candidate


def doc_ten(path):
	names = []
	with open(path, 'r', encoding='utf-8-sig') as f:
		for line in f:
			name = line.strip()
			if name and name not in names:
				names.append(name)
	return names


class Command(BaseCommand):
	help = 'Nạp danh sách ứng cử viên (mỗi dòng một tên, bỏ dòng trống và tên trùng)'

	def add_arguments(self, parser):
		parser.add_argument('path', help='Đường dẫn file danh sách')

	def handle(self, *args, **options):
		path = options['path']
		if not os.path.exists(path):
			raise CommandError(f'Không tìm thấy file {path}')
		names = doc_ten(path)
		existing = set(Candidate.objects.values_list('name', flat=True))
		new_names = [name for name in names if name not in existing]
		with transaction.atomic():
			Candidate.objects.bulk_create([Candidate(name=name) for name in new_names])
		self.stdout.write(self.style.SUCCESS(
			f'Đã thêm {len(new_names)} ứng cử viên, bỏ qua {len(names) - len(new_names)} tên đã có.'
		))
