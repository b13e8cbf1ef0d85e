"""Jinja templates for generated source units."""

HEADER = "# <auto-generated/>\n# Generated by miraveja-digen. Do not edit."

INITIALIZER_TEMPLATE = '''{{ header }}
{% for line in imports %}
{{ line }}
{% endfor %}
{% if type_variables %}

{% for line in type_variables %}
{{ line }}
{% endfor %}
{% endif %}


def {{ function }}({{ signature }}) -> None:
{% for line in body %}
    {{ line }}
{% endfor %}


{{ owner }}.__init__ = {{ function }}
'''

INTERFACE_TEMPLATE = '''{{ header }}
{% for line in imports %}
{{ line }}
{% endfor %}
{% if type_variables %}

{% for line in type_variables %}
{{ line }}
{% endfor %}
{% endif %}


class {{ name }}({{ parents }}):
    """Interface generated from {{ source }}."""
{% for block in members %}

{{ block }}
{% endfor %}
'''

METHOD_TEMPLATE = '''    @abstractmethod
    def {{ name }}({{ signature }}) -> {{ returns }}:
        ...'''

PROPERTY_TEMPLATE = '''    @property
    @abstractmethod
    def {{ name }}(self) -> {{ returns }}:
        ...
{% if writable %}

    @{{ name }}.setter
    @abstractmethod
    def {{ name }}(self, value: {{ returns }}) -> None:
        ...
{% endif %}'''

EVENT_TEMPLATE = "    {{ name }}: {{ returns }}"

REGISTRATION_TEMPLATE = '''{{ header }}
{% for line in imports %}
{{ line }}
{% endfor %}


def {{ function }}(services: {{ collection }}) -> {{ collection }}:
    """Register the annotated services of {{ assembly }}."""
{% if calls %}
    return (
        services
{% for call in calls %}
        {{ call }}
{% endfor %}
    )
{% else %}
    return services
{% endif %}
'''
