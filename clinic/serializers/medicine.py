from rest_framework import serializers

from clinic.models import Medicine
from .common import CleanCharField, PageQuerySerializer

FORMS = [c[0] for c in Medicine.FORM_CHOICES]


def dosage_form(value):
    """Map a free-form dosage form onto the stored choices (TABLET if unknown)."""
    if not value:
        return 'TABLET'
    upper = str(value).strip().upper()
    return upper if upper in FORMS else 'TABLET'


class MedicineListQuerySerializer(PageQuerySerializer):
    category = serializers.CharField(required=False, allow_blank=True, default='')
    lowStock = serializers.BooleanField(required=False, default=False)


class MedicineUpdateSerializer(serializers.Serializer):
    """Client field names; ``to_model_fields`` maps them to model columns."""
    name = CleanCharField(required=False, max_length=255)
    genericName = CleanCharField(required=False, allow_blank=True, max_length=255)
    category = CleanCharField(required=False, max_length=128)
    manufacturer = CleanCharField(required=False, allow_blank=True, max_length=255)
    strength = CleanCharField(required=False, max_length=64)
    dosageForm = serializers.CharField(required=False, allow_blank=True)
    price = serializers.DecimalField(required=False, max_digits=10, decimal_places=2, min_value=0)
    stockQuantity = serializers.IntegerField(required=False, min_value=0)
    expiryDate = serializers.DateField(required=False)
    batchNumber = CleanCharField(required=False, allow_blank=True, max_length=64)
    description = CleanCharField(required=False, allow_blank=True)
    sideEffects = CleanCharField(required=False, allow_blank=True)
    minStockLevel = serializers.IntegerField(required=False, min_value=0)
    requiresPrescription = serializers.BooleanField(required=False)
    isControlledSubstance = serializers.BooleanField(required=False)

    FIELD_MAP = {
        'name': 'name',
        'genericName': 'generic_name',
        'category': 'category',
        'manufacturer': 'manufacturer',
        'strength': 'dosage',
        'price': 'price',
        'stockQuantity': 'stock',
        'expiryDate': 'expiry_date',
        'batchNumber': 'batch_number',
        'description': 'description',
        'sideEffects': 'side_effects',
        'minStockLevel': 'min_stock_level',
        'requiresPrescription': 'requires_prescription',
        'isControlledSubstance': 'is_controlled',
    }

    def to_model_fields(self) -> dict:
        vd = self.validated_data
        fields = {self.FIELD_MAP[k]: v for k, v in vd.items() if k in self.FIELD_MAP}
        if 'dosageForm' in vd:
            fields['form'] = dosage_form(vd['dosageForm'])
        return fields


class MedicineCreateSerializer(MedicineUpdateSerializer):
    name = CleanCharField(max_length=255)
    category = CleanCharField(max_length=128)
    strength = CleanCharField(max_length=64)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    stockQuantity = serializers.IntegerField(min_value=0)
    expiryDate = serializers.DateField()
    minStockLevel = serializers.IntegerField(required=False, min_value=0, default=10)
    requiresPrescription = serializers.BooleanField(required=False, default=False)
    isControlledSubstance = serializers.BooleanField(required=False, default=False)

    def to_model_fields(self) -> dict:
        fields = super().to_model_fields()
        fields.setdefault('form', dosage_form(None))
        return fields


class StockUpdateSerializer(serializers.Serializer):
    stock = serializers.IntegerField(min_value=0, error_messages={
        'min_value': 'Stock must be a non-negative number',
        'invalid': 'Stock must be a non-negative number',
        'required': 'Stock must be a non-negative number',
    })
    operation = serializers.ChoiceField(choices=['set', 'add', 'subtract'], required=False, default='set')
