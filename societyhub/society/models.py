from django.db import models


class Society(models.Model):
    """Residential societies registered on the platform"""
    STATUS_CHOICES = [
        ('pending', 'Pending Approval'),
        ('active', 'Active'),
        ('suspended', 'Suspended'),
    ]

    name = models.CharField(max_length=200)
    code = models.CharField(max_length=50, unique=True)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    pincode = models.CharField(max_length=10, blank=True)
    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=20, blank=True)
    guard_positions = models.PositiveIntegerField(default=0, help_text="Sanctioned number of guard posts")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'societies'
        ordering = ['name']
        verbose_name_plural = 'societies'


class Unit(models.Model):
    """Flats, villas and shops inside a society, identified by block and number"""
    TYPE_CHOICES = [
        ('1BHK', '1 BHK'),
        ('2BHK', '2 BHK'),
        ('3BHK', '3 BHK'),
        ('4BHK', '4 BHK'),
        ('villa', 'Villa'),
        ('shop', 'Shop'),
        ('other', 'Other'),
    ]

    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
    ]

    society = models.ForeignKey(Society, on_delete=models.CASCADE, related_name='units')
    block = models.CharField(max_length=20)
    number = models.CharField(max_length=20)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='2BHK')
    floor = models.IntegerField(null=True, blank=True)
    area_sqft = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.label

    @property
    def label(self):
        return f"{self.block}-{self.number}"

    def _active_resident(self, resident_type):
        # Iterates the (possibly prefetched) residents relation
        for resident in self.residents.all():
            if (resident.is_active and resident.role == resident.ROLE_RESIDENT
                    and resident.resident_type == resident_type):
                return resident
        return None

    @property
    def owner(self):
        return self._active_resident('owner')

    @property
    def tenant(self):
        return self._active_resident('tenant')

    @property
    def occupancy(self):
        """'tenant' when let out, 'owner' when owner occupied, 'vacant' otherwise"""
        if self.tenant:
            return 'tenant'
        if self.owner:
            return 'owner'
        return 'vacant'

    class Meta:
        db_table = 'units'
        ordering = ['block', 'number']
        constraints = [
            models.UniqueConstraint(fields=['society', 'block', 'number'], name='unique_unit_per_society'),
        ]
        indexes = [
            models.Index(fields=['society', 'block'], name='units_society_block_idx'),
        ]
