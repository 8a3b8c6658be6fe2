"""Setup script for the Animated DF exporter."""

from setuptools import setup, find_packages

package_name = 'animated_df'


setup(
    name=package_name,
    version='0.1.0',
    packages=find_packages(exclude=['test']),
    package_data={
        'df_exporter.config': ['*.yaml'],
        'df_exporter.base_templates': ['definitions/*.yaml'],
    },
    include_package_data=True,
    install_requires=[
        'setuptools',
        'aiohttp>=3.8.0',
        'pyyaml>=6.0',
        'numpy>=1.21.0',
    ],
    extras_require={
        'dev': [
            'pytest>=7.0.0',
            'pytest-asyncio>=0.20.0',
            'pytest-cov>=4.0.0',
            'black>=23.0.0',
            'isort>=5.12.0',
            'mypy>=1.0.0',
            'flake8>=6.0.0',
        ],
    },
    zip_safe=False,
    maintainer='Animated Java DF Team',
    maintainer_email='maintainer@example.com',
    description='Exports Animated Java rigs as DiamondFire code templates via CodeClient',
    license='MIT',
    tests_require=['pytest'],
    python_requires='>=3.10',
)
